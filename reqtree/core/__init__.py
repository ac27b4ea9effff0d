"""
Core module - Configuration, issue reporting and the resume cache.
"""

from .config import (
    ParserConfig,
    ResolverConfig,
    OutputConfig,
    LoggingConfig,
    AppConfig,
    DEFAULT_SELECT_ONE_LABEL,
    get_default_config,
    load_config,
)
from .issues import (
    IssueKind,
    IssueSeverity,
    ResolutionIssue,
    IssueLog,
    summarize_issues,
)
from .cache import ResumeCache

__all__ = [
    # Config classes
    'ParserConfig',
    'ResolverConfig',
    'OutputConfig',
    'LoggingConfig',
    'AppConfig',
    'DEFAULT_SELECT_ONE_LABEL',
    # Config functions
    'get_default_config',
    'load_config',
    # Issues
    'IssueKind',
    'IssueSeverity',
    'ResolutionIssue',
    'IssueLog',
    'summarize_issues',
    # Cache
    'ResumeCache',
]
