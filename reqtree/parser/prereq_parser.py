"""
Prerequisite Parser - Build canonical prerequisite trees from catalogue text.

Converts a scraped prerequisite list such as

    "I&C SCI 6B ( min grade = C ) AND ( MATH 2A OR MATH 5A ) AND NO MATH 2B"

into a normalized PrerequisiteTree:

1. Split on top-level " AND " (parenthesized groups stay whole)
2. Parenthesized groups become nested OR nodes
3. "NO ..." segments accumulate into NOT
4. Normalize: collapse a lone OR, fold NOT into AND, drop empty lists

Tokens with no recognized shape are dropped from the tree and reported
as parse-ambiguity issues.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from .classifier import LeafClassifier, ANTIREQUISITE_PREFIX, is_antirequisite
from .models import (
    CoursePrerequisite,
    CourseCorequisite,
    PrerequisiteEdge,
    PrerequisiteTree,
    TreeMember,
    is_prerequisite,
)
from ..core.config import ParserConfig
from ..core.issues import IssueKind, IssueLog, ResolutionIssue
from ..utils.logger import get_logger

logger = get_logger(__name__)

AND_SEPARATOR = " AND "
OR_SEPARATOR = " OR "


@dataclass
class ParseResult:
    """Result of parsing one prerequisite list."""
    tree: PrerequisiteTree
    issues: List[ResolutionIssue] = field(default_factory=list)

    @property
    def dropped_tokens(self) -> List[str]:
        return [
            i.context.get("token", "")
            for i in self.issues
            if i.kind == IssueKind.PARSE_AMBIGUITY
        ]


def normalize_text(text: str) -> str:
    """Collapse whitespace runs and trim."""
    return " ".join(text.split())


def split_top_level(text: str, separator: str) -> List[str]:
    """
    Split on a separator only where no parenthesis is open.

    Empty pieces are discarded.
    """
    parts = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        char = text[i]
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif depth == 0 and text.startswith(separator, i):
            parts.append(text[start:i])
            i += len(separator)
            start = i
            continue
        i += 1
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


def is_group(segment: str) -> bool:
    return segment.startswith("(")


def group_interior(segment: str) -> str:
    """Strip the enclosing parentheses of a group segment."""
    inner = segment[1:]
    if inner.endswith(")"):
        inner = inner[:-1]
    return inner.strip()


class PrerequisiteParser:
    """
    Parser for catalogue prerequisite and antirequisite lists.

    The parser holds only configuration; every call builds its tree
    from scratch.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        classifier: Optional[LeafClassifier] = None,
    ):
        self.config = config or ParserConfig()
        self.classifier = classifier or LeafClassifier()

    def parse(self, prerequisite_text: str, antirequisite_text: str = "") -> PrerequisiteTree:
        """
        Parse prerequisite text into a normalized tree.

        Args:
            prerequisite_text: Prerequisite list without its field label
            antirequisite_text: Optional separate antirequisite list

        Returns:
            PrerequisiteTree (empty when nothing was recognized)
        """
        return self.parse_detailed(prerequisite_text, antirequisite_text).tree

    def parse_detailed(self, prerequisite_text: str, antirequisite_text: str = "") -> ParseResult:
        """Parse and also return the issues recorded along the way."""
        issues = IssueLog()
        all_of: List[TreeMember] = []
        none_of: List[TreeMember] = []

        for segment in split_top_level(normalize_text(prerequisite_text or ""), AND_SEPARATOR):
            if is_group(segment):
                or_node = self._build_or_group(segment, issues)
                if or_node is not None:
                    all_of.append(or_node)
                continue

            classified = self.classifier.classify(segment)
            if classified is None:
                self._report_unrecognized(segment, issues)
            elif classified.antirequisite:
                none_of.append(classified.prerequisite)
            else:
                all_of.append(classified.prerequisite)

        none_of.extend(self._parse_antirequisites(antirequisite_text or "", issues))

        tree = self._normalize(all_of, none_of)
        for first, second in self.config.equivalent_courses:
            tree = patch_equivalent_courses(tree, first, second)

        return ParseResult(tree=tree, issues=issues.issues)

    def _build_or_group(self, segment: str, issues: IssueLog) -> Optional[PrerequisiteTree]:
        members = []
        for token in split_top_level(group_interior(segment), OR_SEPARATOR):
            classified = self.classifier.classify(token)
            if classified is None:
                self._report_unrecognized(token, issues)
                continue
            members.append(classified.prerequisite)
        if not members:
            return None
        return PrerequisiteTree(any_of=members)

    def _parse_antirequisites(self, text: str, issues: IssueLog) -> List[TreeMember]:
        """Every segment of a separate antirequisite list lands in NOT."""
        members: List[TreeMember] = []
        for segment in split_top_level(normalize_text(text), AND_SEPARATOR):
            if is_group(segment):
                tokens = split_top_level(group_interior(segment), OR_SEPARATOR)
                leaves = [self._antirequisite_leaf(t, issues) for t in tokens]
                leaves = [leaf for leaf in leaves if leaf is not None]
                if leaves:
                    members.append(PrerequisiteTree(any_of=leaves))
                continue
            leaf = self._antirequisite_leaf(segment, issues)
            if leaf is not None:
                members.append(leaf)
        return members

    def _antirequisite_leaf(self, token: str, issues: IssueLog):
        prefixed = token if is_antirequisite(token) else f"{ANTIREQUISITE_PREFIX}{token}"
        leaf = self.classifier.classify_antirequisite(prefixed)
        if leaf is None:
            self._report_unrecognized(token, issues)
        return leaf

    def _report_unrecognized(self, token: str, issues: IssueLog) -> None:
        if not self.config.report_unrecognized:
            return
        issues.record(
            IssueKind.PARSE_AMBIGUITY,
            f"Dropped unrecognized prerequisite token '{token}'",
            token=token,
        )

    @staticmethod
    def _normalize(all_of: List[TreeMember], none_of: List[TreeMember]) -> PrerequisiteTree:
        if not none_of and len(all_of) == 1:
            only = all_of[0]
            if isinstance(only, PrerequisiteTree) and only.is_pure_or:
                return PrerequisiteTree(any_of=only.any_of)
        if none_of:
            all_of = [*all_of, PrerequisiteTree(none_of=none_of)]
        return PrerequisiteTree(all_of=all_of)


def flatten_prerequisites(tree: PrerequisiteTree) -> List[str]:
    """
    Referenced ids in depth-first order, AND before OR.

    NOT branches are skipped: an antirequisite is not a dependency.
    """
    ids: List[str] = []
    for member in (*tree.all_of, *tree.any_of):
        if is_prerequisite(member):
            ids.append(member.reference_id)
        else:
            ids.extend(flatten_prerequisites(member))
    return ids


def prerequisite_edges(course_id: str, department: str, tree: PrerequisiteTree) -> List[PrerequisiteEdge]:
    """
    Dependency-edge rows for one course, deduplicated and sorted.

    Args:
        course_id: Dependent course, e.g. "COMPSCI 161"
        department: Department code of the dependent course
        tree: Its prerequisite tree
    """
    dependency_id = course_id.replace(" ", "")
    edges = {
        PrerequisiteEdge(
            dependency_id=dependency_id,
            prerequisite_id=prerequisite_id,
            dependency_dept=department,
        )
        for prerequisite_id in flatten_prerequisites(tree)
    }
    return sorted(edges)


def _course_leaf(members: Iterable[TreeMember], course_id: str):
    return next(
        (
            m for m in members
            if isinstance(m, (CoursePrerequisite, CourseCorequisite)) and m.course_id == course_id
        ),
        None,
    )


def _patch_members(members: Tuple[TreeMember, ...], first: str, second: str) -> Tuple[TreeMember, ...]:
    return tuple(
        patch_equivalent_courses(m, first, second) if isinstance(m, PrerequisiteTree) else m
        for m in members
    )


def patch_equivalent_courses(tree: PrerequisiteTree, first: str, second: str) -> PrerequisiteTree:
    """
    Make two interchangeable courses appear together in every OR.

    An OR that lists exactly one of the pair gains a copy of that leaf
    (same grade or coreq flag) naming the other course. ORs listing both
    or neither are left alone. Returns a new tree.
    """
    any_of = _patch_members(tree.any_of, first, second)
    first_leaf = _course_leaf(any_of, first)
    second_leaf = _course_leaf(any_of, second)
    if (first_leaf is None) != (second_leaf is None):
        original = first_leaf or second_leaf
        counterpart = second if first_leaf is not None else first
        any_of = (*any_of, replace(original, course_id=counterpart))
        logger.debug(f"Added {counterpart} alongside {original.course_id}")

    return PrerequisiteTree(
        all_of=_patch_members(tree.all_of, first, second),
        any_of=any_of,
        none_of=_patch_members(tree.none_of, first, second),
    )
