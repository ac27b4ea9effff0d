"""
CLI - Command-line interface for building requirement trees.

Main entry point for the application. Two subcommands:

    reqtree prereqs INPUT    catalogue prerequisite text -> prerequisite trees
    reqtree audit INPUT      degree audit blocks -> programs

Each run:
1. Loads configuration (and .env)
2. Loads the input document
3. Builds the trees
4. Validates them
5. Writes JSON to a file or stdout
"""

import argparse
import hashlib
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from dotenv import load_dotenv

from .audit import AuditRuleResolver, CatalogLookup, InMemoryCatalog, ProgramId
from .core.cache import ResumeCache
from .core.config import AppConfig, OutputConfig, load_config
from .core.issues import ResolutionIssue, summarize_issues
from .parser import PrerequisiteParser, PrerequisiteTree, prerequisite_edges
from .utils.logger import LogContext, ProgressLogger, get_logger, setup_logging
from .validator import TreeValidator, ValidationResult

logger = get_logger(__name__)

PrereqEntry = Union[str, Dict[str, Any]]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-o", "--output",
        type=Path,
        help="Output JSON file (default: stdout)",
    )
    common.add_argument(
        "-c", "--config",
        type=Path,
        help="Configuration file (YAML)",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    common.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when validation reports errors",
    )

    parser = argparse.ArgumentParser(
        prog="reqtree",
        description="Build canonical requirement trees from catalogue and degree audit data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s prereqs prerequisites.json -o trees.json --cache prereq-cache.json
  %(prog)s audit audit.json --catalog courses.json --block-id U-MAJOR-201-BS
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    prereqs = subparsers.add_parser(
        "prereqs",
        parents=[common],
        help="Parse prerequisite text into prerequisite trees",
    )
    prereqs.add_argument(
        "input",
        type=Path,
        help="JSON or YAML object mapping course id to prerequisite text",
    )
    prereqs.add_argument(
        "--cache",
        type=Path,
        help="Resume cache file; read if present, written after the run",
    )

    audit = subparsers.add_parser(
        "audit",
        parents=[common],
        help="Resolve degree audit blocks into programs",
    )
    audit.add_argument(
        "input",
        type=Path,
        help="A block, an audit response with blockArray, or {\"blocks\": {id: block}}",
    )
    audit.add_argument(
        "--catalog",
        type=Path,
        required=True,
        help="Course catalog snapshot (JSON or YAML)",
    )
    audit.add_argument(
        "--block-id",
        help="Block id <school>-<programType>-<code>[-<degreeType>] of a single block",
    )

    return parser.parse_args(argv)


def load_document(path: Path | str) -> Any:
    """
    Load a JSON or YAML input document.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Could not decode {path}: {e}") from e


def dump_json(data: Any, output: OutputConfig) -> str:
    return json.dumps(data, indent=output.indent, sort_keys=output.sort_keys, ensure_ascii=output.ensure_ascii)


def write_output(data: Any, output_path: Path | str, output: OutputConfig) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dump_json(data, output), encoding="utf-8")
    logger.info(f"Output written to: {output_path}")
    return output_path


def _fingerprint(entry: PrereqEntry, config: AppConfig) -> str:
    payload = json.dumps(
        {"entry": entry, "equivalent_courses": config.parser.equivalent_courses},
        sort_keys=True,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _prereq_fields(course_id: str, entry: PrereqEntry) -> Tuple[str, str, str]:
    """(prerequisite text, antirequisite text, department) of one input entry."""
    department = course_id.rsplit(" ", 1)[0]
    if isinstance(entry, str):
        return entry, "", department
    if not isinstance(entry, dict):
        raise ValueError(f"Entry for {course_id} must be a string or an object")
    return (
        entry.get("prerequisite") or "",
        entry.get("antirequisite") or "",
        entry.get("department") or department,
    )


def _log_issues(issues: List[ResolutionIssue], subject: str) -> None:
    if issues:
        logger.info(f"{subject}: {summarize_issues(issues)}")


def run_prereq_pipeline(
    input_path: str | Path,
    output_path: Optional[str | Path] = None,
    config: Optional[AppConfig] = None,
    cache: Optional[ResumeCache] = None,
) -> Dict[str, Any]:
    """
    Programmatic interface to parse a file of prerequisite lists.

    Args:
        input_path: JSON/YAML object mapping course id to prerequisite text,
            or to {"prerequisite", "antirequisite", "department"}
        output_path: Optional path to write output
        config: Optional configuration
        cache: Optional resume cache; entries whose input is unchanged are
            reused and new results are added (the caller saves it)

    Returns:
        {"trees": {course id: tree}, "edges": [edge, ...]}
    """
    config = config or load_config()
    document = load_document(input_path)
    if not isinstance(document, dict):
        raise ValueError(f"{input_path} must map course ids to prerequisite text")

    parser = PrerequisiteParser(config=config.parser)
    trees: Dict[str, Dict[str, Any]] = {}
    edges = []
    issues: List[ResolutionIssue] = []

    progress = ProgressLogger(logger, "Parsing prerequisites", total=len(document))
    for course_id, entry in document.items():
        prerequisite_text, antirequisite_text, department = _prereq_fields(course_id, entry)
        fingerprint = _fingerprint(entry, config)

        cached = cache.get(course_id, fingerprint) if cache is not None else None
        if cached is not None:
            tree = PrerequisiteTree.from_dict(cached)
        else:
            result = parser.parse_detailed(prerequisite_text, antirequisite_text)
            tree = result.tree
            issues.extend(result.issues)
            if cache is not None:
                cache.put(course_id, fingerprint, tree.to_dict())

        trees[course_id] = tree.to_dict()
        edges.extend(prerequisite_edges(course_id, department, tree))
        progress.increment()

    progress.complete(f"{len(trees)} trees, {len(edges)} edges")
    if cache is not None:
        logger.info(f"Resume cache: {cache.hits} hits, {cache.misses} misses")
    _log_issues(issues, "Prerequisite parse issues")

    output = {
        "trees": trees,
        "edges": [e.to_dict() for e in sorted(edges)],
    }
    if output_path:
        write_output(output, output_path, config.output)
    return output


def _select_blocks(document: Any, block_id: Optional[str]) -> List[Tuple[str, Dict[str, Any]]]:
    """(block id, raw block) pairs to resolve from an audit input document."""
    if not isinstance(document, dict):
        raise ValueError("Audit input must be a JSON object")

    if "blocks" in document:
        blocks = document["blocks"]
        if not isinstance(blocks, dict):
            raise ValueError("\"blocks\" must map block ids to blocks")
        return list(blocks.items())

    if not block_id:
        raise ValueError("--block-id is required for a single block or an audit response")

    if "blockArray" in document:
        program_id = ProgramId.parse(block_id)
        for block in document["blockArray"] or []:
            if (isinstance(block, dict)
                    and block.get("requirementType") == program_id.program_type
                    and block.get("requirementValue") == program_id.code):
                return [(block_id, block)]
        raise ValueError(f"Audit response has no {program_id.program_type} block for {program_id.code}")

    return [(block_id, document)]


def run_audit_pipeline(
    input_path: str | Path,
    catalog: CatalogLookup | str | Path,
    block_id: Optional[str] = None,
    output_path: Optional[str | Path] = None,
    config: Optional[AppConfig] = None,
) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Programmatic interface to resolve degree audit blocks.

    Args:
        input_path: A block, an audit response ({"blockArray": [...]}) or
            {"blocks": {block id: block}}
        catalog: Catalog lookup, or path to a catalog snapshot
        block_id: Id of the block (required unless the input has "blocks")
        output_path: Optional path to write output
        config: Optional configuration

    Returns:
        One program, or a list of programs for a "blocks" input
    """
    config = config or load_config()
    if not isinstance(catalog, CatalogLookup):
        catalog = InMemoryCatalog.from_file(catalog)

    document = load_document(input_path)
    selected = _select_blocks(document, block_id)
    resolver = AuditRuleResolver(catalog, config.resolver)

    programs = []
    for current_id, block in selected:
        with LogContext(logger, "Resolving block", block_id=current_id):
            result = resolver.parse_block_detailed(current_id, block)
            _log_issues(result.issues, f"Block {current_id} issues")
            programs.append(result.program.to_dict())

    output: Union[Dict[str, Any], List[Dict[str, Any]]] = programs
    if "blocks" not in document:
        output = programs[0]

    if output_path:
        write_output(output, output_path, config.output)
    return output


def validate_output(command: str, output: Any, strict: bool = False) -> ValidationResult:
    """Validate pipeline output before it is reported as written."""
    validator = TreeValidator(strict_mode=strict)
    result = ValidationResult(valid=True)

    if command == "prereqs":
        for course_id, tree in output["trees"].items():
            result = result.merge(validator.validate_prerequisite_tree(tree, path=f"$.trees['{course_id}']"))
    else:
        programs = output if isinstance(output, list) else [output]
        for i, program in enumerate(programs):
            result = result.merge(validator.validate_program(program, path=f"$[{i}]"))

    return result


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_args(argv)
    load_dotenv()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        setup_logging()
        logger.error(f"Could not load configuration: {e}")
        return 1

    log_level = "DEBUG" if args.verbose else config.logging.level
    setup_logging(level=log_level, format_string=config.logging.format, log_file=config.logging.file)

    logger.info(f"Input: {args.input}")

    try:
        if args.command == "prereqs":
            cache = ResumeCache.load(args.cache) if args.cache else None
            output = run_prereq_pipeline(args.input, config=config, cache=cache)
            if cache is not None and cache.dirty:
                cache.save()
        else:
            output = run_audit_pipeline(args.input, args.catalog, block_id=args.block_id, config=config)

        validation = validate_output(args.command, output)
        logger.info(f"Validation: valid={validation.valid}, "
                    f"errors={len(validation.errors)}, "
                    f"warnings={len(validation.warnings)}")
        for issue in validation.errors[:5]:
            logger.error(f"  - {issue.code} at {issue.path}: {issue.message}")
        for issue in validation.warnings[:5]:
            logger.warning(f"  - {issue.code} at {issue.path}: {issue.message}")

        if args.output:
            write_output(output, args.output, config.output)
        else:
            print(dump_json(output, config.output))

        if validation.errors:
            logger.warning("Completed with errors")
            return 1 if args.strict else 0
        logger.info("Completed successfully")
        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
