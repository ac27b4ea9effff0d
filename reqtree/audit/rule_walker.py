"""
Rule Walker - Turn a degree audit's rule array into canonical requirements.

Dispatch per rule type:

    Course              -> Course (classesBegin) or Unit (creditsBegin)
    Group               -> Group of the nested requirements
    Subset              -> Group requiring all nested requirements
    IfStmt              -> branches spliced in, or wrapped in "select 1"
    Complete/Incomplete -> Marker
    Block/Noncourse     -> nothing (stitched in by the caller)

Unknown and malformed rules are skipped and reported; every other rule
still resolves.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .catalog import CatalogCourse, CatalogLookup
from .course_resolver import CourseReferenceResolver
from .labels import normalize_label
from .models import (
    Block,
    BlockRule,
    CourseReference,
    CourseRequirement,
    CourseRule,
    GroupRequirement,
    GroupRule,
    IfStmtRule,
    MalformedRule,
    MarkerRequirement,
    MarkerRule,
    NoncourseRule,
    Program,
    ProgramId,
    Requirement,
    RuleNode,
    SubsetRule,
    UnitRequirement,
    UnknownRule,
    parse_rule,
)
from ..core.config import ResolverConfig
from ..core.issues import IssueKind, IssueLog, IssueSeverity, ResolutionIssue
from ..utils.logger import get_logger

logger = get_logger(__name__)

RuleInput = Union[RuleNode, Dict[str, Any]]


@dataclass
class ResolutionResult:
    """Requirements resolved from one rule array, with the issues met on the way."""
    requirements: List[Requirement]
    issues: List[ResolutionIssue] = field(default_factory=list)
    program: Optional[Program] = None

    def issues_of_kind(self, kind: IssueKind) -> List[ResolutionIssue]:
        return [i for i in self.issues if i.kind == kind]


def as_rule_nodes(rule_array: Iterable[RuleInput]) -> List[RuleNode]:
    """Decode raw rule objects; already decoded rules pass through."""
    return [parse_rule(r) if isinstance(r, dict) else r for r in rule_array or ()]


def flatten_if_stmt(rules: Iterable[RuleNode]) -> List[RuleNode]:
    """Replace every IfStmt by its ifPart then elsePart rules, recursively."""
    flattened: List[RuleNode] = []
    for rule in rules:
        if isinstance(rule, IfStmtRule):
            flattened.extend(flatten_if_stmt(rule.if_part))
            flattened.extend(flatten_if_stmt(rule.else_part))
        else:
            flattened.append(rule)
    return flattened


class AuditRuleResolver:
    """
    Resolver from audit rule arrays to requirement trees.

    Holds the catalog (through a CourseReferenceResolver) and configuration.
    Each call collects issues into its own log, so instances can be reused
    across blocks.
    """

    def __init__(
        self,
        catalog: CatalogLookup,
        config: Optional[ResolverConfig] = None,
        course_resolver: Optional[CourseReferenceResolver] = None,
    ):
        self.config = config or ResolverConfig()
        self.course_resolver = course_resolver or CourseReferenceResolver(catalog, self.config)

    def resolve(self, rule_array: Sequence[RuleInput]) -> List[Requirement]:
        """
        Resolve a rule array into requirements.

        Args:
            rule_array: Raw rule objects or decoded RuleNodes

        Returns:
            Resolved requirements in input order
        """
        return self.resolve_detailed(rule_array).requirements

    def resolve_detailed(self, rule_array: Sequence[RuleInput]) -> ResolutionResult:
        issues = IssueLog()
        requirements = self._walk(as_rule_nodes(rule_array), issues, "ruleArray")
        return ResolutionResult(requirements=requirements, issues=issues.issues)

    def parse_block(self, block_id: str, block: Union[Block, Dict[str, Any]]) -> Program:
        """
        Build a Program from a block and its "<school>-<type>-<code>[-<degree>]" id.

        Raises:
            ValueError: If a raw block has no ruleArray
        """
        return self.parse_block_detailed(block_id, block).program

    def parse_block_detailed(self, block_id: str, block: Union[Block, Dict[str, Any]]) -> ResolutionResult:
        if isinstance(block, dict):
            block = Block.from_dict(block)

        issues = IssueLog()
        program_id = ProgramId.parse(block_id)
        if not program_id.is_complete:
            issues.record(
                IssueKind.MALFORMED_BLOCK_IDENTIFIER,
                f"Block id '{block_id}' is missing school, program type or code",
                block_id=block_id,
            )

        requirements = self._walk(list(block.rule_array), issues, "ruleArray")
        program = Program(program_id=program_id, name=block.title, requirements=requirements)
        logger.debug(f"Parsed block {block_id} ({block.title}) into {len(requirements)} requirements")
        return ResolutionResult(requirements=requirements, issues=issues.issues, program=program)

    def _walk(self, rules: Sequence[RuleNode], issues: IssueLog, path: str) -> List[Requirement]:
        resolved: List[Requirement] = []
        for index, rule in enumerate(rules):
            resolved.extend(self._resolve_rule(rule, issues, f"{path}[{index}]"))
        return resolved

    def _resolve_rule(self, rule: RuleNode, issues: IssueLog, path: str) -> List[Requirement]:
        if isinstance(rule, (BlockRule, NoncourseRule)):
            return []

        if isinstance(rule, CourseRule):
            requirement = self._resolve_course_rule(rule, issues, path)
            return [requirement] if requirement is not None else []

        if isinstance(rule, GroupRule):
            return [GroupRequirement(
                label=normalize_label(rule.label),
                requirement_count=rule.number_of_groups,
                requirements=self._walk(rule.rule_array, issues, f"{path}.ruleArray"),
            )]

        if isinstance(rule, IfStmtRule):
            return self._resolve_if_stmt(rule, issues, path)

        if isinstance(rule, MarkerRule):
            return [MarkerRequirement(label=normalize_label(rule.label))]

        if isinstance(rule, SubsetRule):
            requirements = self._walk(rule.rule_array, issues, f"{path}.ruleArray")
            return [GroupRequirement(
                label=normalize_label(rule.label),
                requirement_count=len(requirements),
                requirements=requirements,
            )]

        if isinstance(rule, UnknownRule):
            message = f"Skipped rule '{rule.label}' of unknown type '{rule.raw_type}'"
            issues.record(IssueKind.STRUCTURAL_INVARIANT_VIOLATION, message, path=path, rule_type=rule.raw_type)
            logger.warning(f"{message} at {path}")
            return []

        if isinstance(rule, MalformedRule):
            message = f"Skipped malformed {rule.raw_type or 'rule'} '{rule.label}': {rule.reason}"
            issues.record(IssueKind.STRUCTURAL_INVARIANT_VIOLATION, message, path=path, rule_type=rule.raw_type)
            logger.warning(f"{message} at {path}")
            return []

        issues.record(
            IssueKind.STRUCTURAL_INVARIANT_VIOLATION,
            f"Skipped unsupported rule value {type(rule).__name__}",
            path=path,
        )
        return []

    def _resolve_course_rule(self, rule: CourseRule, issues: IssueLog, path: str) -> Optional[Requirement]:
        if rule.classes_begin is None and rule.credits_begin is None:
            logger.debug(f"Dropped course rule '{rule.label}' at {path}: no class or credit count")
            return None

        included = self._resolve_references(rule.course_array, issues, f"{path}.courseArray")
        excluded = self._resolve_references(rule.except_array, issues, f"{path}.except.courseArray")
        excluded_ids = {c.id for c in excluded}

        unique: Dict[str, CatalogCourse] = {}
        for course in included:
            if course.id not in excluded_ids:
                unique.setdefault(course.id, course)
        courses = tuple(c.id for c in sorted(unique.values(), key=CatalogCourse.sort_key))

        label = normalize_label(rule.label)
        if rule.classes_begin is not None:
            return CourseRequirement(label=label, course_count=rule.classes_begin, courses=courses)
        return UnitRequirement(label=label, unit_count=rule.credits_begin, courses=courses)

    def _resolve_references(
        self,
        references: Sequence[CourseReference],
        issues: IssueLog,
        path: str,
    ) -> List[CatalogCourse]:
        courses: List[CatalogCourse] = []
        for index, reference in enumerate(references):
            courses.extend(self.course_resolver.resolve(reference, issues=issues, path=f"{path}[{index}]"))
        return courses

    def _resolve_if_stmt(self, rule: IfStmtRule, issues: IssueLog, path: str) -> List[Requirement]:
        flattened = flatten_if_stmt([rule])
        if any(isinstance(r, BlockRule) for r in flattened):
            issues.record(
                IssueKind.STRUCTURAL_INVARIANT_VIOLATION,
                f"Discarded conditional '{rule.label}' that selects another block",
                path=path,
                severity=IssueSeverity.INFO,
            )
            return []

        requirements = self._walk(flattened, issues, f"{path}.branches")
        if len(requirements) > 1:
            return [GroupRequirement(
                label=self.config.select_one_label,
                requirement_count=1,
                requirements=requirements,
            )]
        return requirements
