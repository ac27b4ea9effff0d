"""
Configuration management for the requirement tree engines.

Provides dataclasses for all configuration options with sensible defaults,
YAML file loading, and validation.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple
from pathlib import Path
import os
import yaml


DEFAULT_SELECT_ONE_LABEL = "Select 1 of the following"


@dataclass
class ParserConfig:
    """Configuration for the prerequisite expression parser."""
    # Pairs of course ids that are interchangeable wherever either appears in an OR
    equivalent_courses: List[Tuple[str, str]] = field(default_factory=list)
    # Record unrecognized tokens as issues (they are always dropped from the tree)
    report_unrecognized: bool = True

    def __post_init__(self):
        pairs = []
        for pair in self.equivalent_courses:
            if len(pair) != 2:
                raise ValueError(f"Equivalent course entry must be a pair: {pair!r}")
            pairs.append((str(pair[0]), str(pair[1])))
        self.equivalent_courses = pairs


@dataclass
class ResolverConfig:
    """Configuration for the audit rule resolver."""
    # Resolve wildcards with a run of three or more '@' to nothing instead of matching them loosely
    strict_wildcards: bool = False
    select_one_label: str = DEFAULT_SELECT_ONE_LABEL
    credit_codes: List[str] = field(default_factory=lambda: ["DWCREDIT", "DWCREDITS"])


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    indent: int = 2
    sort_keys: bool = False
    ensure_ascii: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = field(default_factory=lambda: os.getenv("REQTREE_LOG_LEVEL", "INFO"))
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file: Optional[Path] = None

    def __post_init__(self):
        if self.file and isinstance(self.file, str):
            self.file = Path(self.file)


@dataclass
class AppConfig:
    """
    Root configuration object containing all settings.

    Can be loaded from YAML file or constructed programmatically.
    """
    parser: ParserConfig = field(default_factory=ParserConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> 'AppConfig':
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppConfig':
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            AppConfig instance
        """
        try:
            return cls(
                parser=ParserConfig(**(data.get('parser') or {})),
                resolver=ResolverConfig(**(data.get('resolver') or {})),
                output=OutputConfig(**(data.get('output') or {})),
                logging=LoggingConfig(**(data.get('logging') or {})),
            )
        except TypeError as e:
            raise ValueError(f"Unknown configuration option: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Returns:
            Configuration as dictionary
        """
        return {
            'parser': {
                'equivalent_courses': [list(p) for p in self.parser.equivalent_courses],
                'report_unrecognized': self.parser.report_unrecognized,
            },
            'resolver': {
                'strict_wildcards': self.resolver.strict_wildcards,
                'select_one_label': self.resolver.select_one_label,
                'credit_codes': list(self.resolver.credit_codes),
            },
            'output': {
                'indent': self.output.indent,
                'sort_keys': self.output.sort_keys,
                'ensure_ascii': self.output.ensure_ascii,
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file': str(self.logging.file) if self.logging.file else None,
            },
        }

    def save_yaml(self, path: Path | str) -> None:
        """
        Save configuration to a YAML file.

        Args:
            path: Path to output YAML file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def get_default_config() -> AppConfig:
    """
    Get the default application configuration.

    Returns:
        AppConfig with all default values
    """
    return AppConfig()


def load_config(config_path: Optional[Path | str] = None) -> AppConfig:
    """
    Load configuration from file or return defaults.

    Looks for config in this order:
    1. Provided path
    2. ./config/default.yaml
    3. ./config.yaml
    4. ~/.reqtree/config.yaml
    5. Default values

    Args:
        config_path: Optional path to config file

    Returns:
        AppConfig instance
    """
    if config_path:
        return AppConfig.from_yaml(config_path)

    default_paths = [
        Path("config/default.yaml"),
        Path("config.yaml"),
        Path.home() / ".reqtree" / "config.yaml",
    ]

    for path in default_paths:
        if path.exists():
            return AppConfig.from_yaml(path)

    return get_default_config()
