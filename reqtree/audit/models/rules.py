"""
Audit Rule Models - Decoded form of a degree audit's rule arrays.

The audit service returns each requirement block as nested JSON rules
discriminated by "ruleType". Decoding never fails as a whole: a rule of
an unknown type becomes UnknownRule and a rule missing required fields
becomes MalformedRule, so one bad rule cannot take its siblings down.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple, Union
from enum import Enum


class RuleType(Enum):
    """Rule types emitted by the audit service."""
    GROUP = "Group"
    COURSE = "Course"
    IF_STMT = "IfStmt"
    BLOCK = "Block"
    NONCOURSE = "Noncourse"
    COMPLETE = "Complete"
    INCOMPLETE = "Incomplete"
    SUBSET = "Subset"


class WithOperator(Enum):
    """Comparison operators allowed in a with-clause."""
    LT = "<"
    LE = "<="
    EQ = "="
    GT = ">"
    GE = ">="


@dataclass(frozen=True)
class WithClause:
    """Post-resolution filter attached to a course reference."""
    code: str
    operator: str
    value_list: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "value_list", tuple(str(v) for v in self.value_list))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WithClause':
        values = data.get("valueList")
        if values is None:
            values = ()
        elif isinstance(values, (str, int, float)):
            values = (values,)
        return cls(
            code=str(data.get("code", "")),
            operator=str(data.get("operator", "")).strip(),
            value_list=tuple(values),
        )


@dataclass(frozen=True)
class CourseReference:
    """
    A (pattern of) course(s) named by a Course rule.

    `number` may be exact ("161"), a department wildcard ("@"), a
    wildcard pattern ("1@@"), or a range ("100-199", or "100" with
    number_end "199").
    """
    discipline: str
    number: str
    number_end: Optional[str] = None
    with_array: Tuple[WithClause, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "with_array", tuple(self.with_array))

    @property
    def course_id_like(self) -> str:
        """The "<discipline> <number>[-<end>]" form used for matching."""
        suffix = f"-{self.number_end}" if self.number_end else ""
        return f"{self.discipline} {self.number}{suffix}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CourseReference':
        """
        Raises:
            ValueError: If discipline or number is missing
        """
        discipline = data.get("discipline")
        number = data.get("number")
        if not discipline or not number:
            raise ValueError(f"Course reference needs discipline and number: {data!r}")
        return cls(
            discipline=str(discipline).strip(),
            number=str(number).strip(),
            number_end=str(data["numberEnd"]).strip() if data.get("numberEnd") else None,
            with_array=tuple(WithClause.from_dict(w) for w in data.get("withArray") or ()),
        )


@dataclass(frozen=True)
class GroupRule:
    """`number_of_groups` of the nested rules must be satisfied."""
    label: str
    number_of_groups: int
    rule_array: Tuple["RuleNode", ...] = field(default_factory=tuple)
    number_of_rules: Optional[int] = None

    rule_type: ClassVar[RuleType] = RuleType.GROUP


@dataclass(frozen=True)
class CourseRule:
    """Take `classes_begin` courses and/or `credits_begin` units from a course list."""
    label: str
    course_array: Tuple[CourseReference, ...] = field(default_factory=tuple)
    except_array: Tuple[CourseReference, ...] = field(default_factory=tuple)
    credits_begin: Optional[int] = None
    classes_begin: Optional[int] = None

    rule_type: ClassVar[RuleType] = RuleType.COURSE


@dataclass(frozen=True)
class IfStmtRule:
    """Conditional requirements; used for per-specialization branches."""
    label: str
    if_part: Tuple["RuleNode", ...] = field(default_factory=tuple)
    else_part: Tuple["RuleNode", ...] = field(default_factory=tuple)

    rule_type: ClassVar[RuleType] = RuleType.IF_STMT


@dataclass(frozen=True)
class BlockRule:
    """Reference to another requirement block, stitched in by the caller."""
    label: str
    num_blocks: Optional[str] = None
    block_type: Optional[str] = None
    value: Optional[str] = None

    rule_type: ClassVar[RuleType] = RuleType.BLOCK


@dataclass(frozen=True)
class NoncourseRule:
    """A non-course requirement such as design units."""
    label: str
    num_noncourses: Optional[str] = None
    code: Optional[str] = None

    rule_type: ClassVar[RuleType] = RuleType.NONCOURSE


@dataclass(frozen=True)
class MarkerRule:
    """A requirement an advisor marks as done (e.g. entry level writing)."""
    label: str
    complete: bool = True

    @property
    def rule_type(self) -> RuleType:
        return RuleType.COMPLETE if self.complete else RuleType.INCOMPLETE


@dataclass(frozen=True)
class SubsetRule:
    """All nested rules must be satisfied."""
    label: str
    rule_array: Tuple["RuleNode", ...] = field(default_factory=tuple)

    rule_type: ClassVar[RuleType] = RuleType.SUBSET


@dataclass(frozen=True)
class UnknownRule:
    """A rule whose ruleType this decoder does not know."""
    label: str
    raw_type: str
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class MalformedRule:
    """A rule of a known type missing fields it needs."""
    label: str
    raw_type: str
    reason: str
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


RuleNode = Union[
    GroupRule, CourseRule, IfStmtRule, BlockRule, NoncourseRule,
    MarkerRule, SubsetRule, UnknownRule, MalformedRule,
]


def _parse_count(value: Any, name: str) -> Optional[int]:
    """Counts arrive as strings ("2", "8.0"); absent or blank means no count."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"{name} is not a number: {value!r}") from e


def parse_rule_array(items: Any) -> Tuple[RuleNode, ...]:
    """Decode a ruleArray; a missing array decodes to no rules."""
    if not items:
        return ()
    if not isinstance(items, list):
        return (MalformedRule(label="", raw_type="", reason="ruleArray is not a list", raw={"ruleArray": items}),)
    return tuple(parse_rule(item) for item in items)


def parse_rule(data: Any) -> RuleNode:
    """
    Decode one rule object.

    Never raises: unknown types and malformed rules are returned as
    UnknownRule / MalformedRule for the walker to skip.
    """
    if not isinstance(data, dict):
        return MalformedRule(label="", raw_type="", reason=f"rule is a {type(data).__name__}, not an object")

    label = str(data.get("label") or "")
    raw_type = str(data.get("ruleType") or "")
    requirement = data.get("requirement") or {}

    try:
        rule_type = RuleType(raw_type)
    except ValueError:
        return UnknownRule(label=label, raw_type=raw_type, raw=data)

    try:
        if rule_type == RuleType.GROUP:
            number_of_groups = _parse_count(requirement.get("numberOfGroups"), "numberOfGroups")
            if number_of_groups is None:
                raise ValueError("numberOfGroups is missing")
            return GroupRule(
                label=label,
                number_of_groups=number_of_groups,
                rule_array=parse_rule_array(data.get("ruleArray")),
                number_of_rules=_parse_count(requirement.get("numberOfRules"), "numberOfRules"),
            )

        if rule_type == RuleType.COURSE:
            except_part = requirement.get("except") or {}
            return CourseRule(
                label=label,
                course_array=tuple(CourseReference.from_dict(c) for c in requirement.get("courseArray") or ()),
                except_array=tuple(CourseReference.from_dict(c) for c in except_part.get("courseArray") or ()),
                credits_begin=_parse_count(requirement.get("creditsBegin"), "creditsBegin"),
                classes_begin=_parse_count(requirement.get("classesBegin"), "classesBegin"),
            )

        if rule_type == RuleType.IF_STMT:
            if_part = requirement.get("ifPart")
            if not isinstance(if_part, dict):
                raise ValueError("ifPart is missing")
            else_part = requirement.get("elsePart") or {}
            return IfStmtRule(
                label=label,
                if_part=parse_rule_array(if_part.get("ruleArray")),
                else_part=parse_rule_array(else_part.get("ruleArray")),
            )

        if rule_type == RuleType.BLOCK:
            return BlockRule(
                label=label,
                num_blocks=requirement.get("numBlocks"),
                block_type=requirement.get("type"),
                value=requirement.get("value"),
            )

        if rule_type == RuleType.NONCOURSE:
            return NoncourseRule(
                label=label,
                num_noncourses=requirement.get("numNoncourses"),
                code=requirement.get("code"),
            )

        if rule_type in (RuleType.COMPLETE, RuleType.INCOMPLETE):
            return MarkerRule(label=label, complete=rule_type == RuleType.COMPLETE)

        return SubsetRule(label=label, rule_array=parse_rule_array(data.get("ruleArray")))

    except (AttributeError, TypeError, ValueError) as e:
        return MalformedRule(label=label, raw_type=raw_type, reason=str(e), raw=data)


@dataclass(frozen=True)
class Block:
    """One requirement block of a degree audit."""
    title: str
    rule_array: Tuple[RuleNode, ...] = field(default_factory=tuple)
    requirement_type: Optional[str] = None
    requirement_value: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """
        Raises:
            ValueError: If the data is not an object with a ruleArray
        """
        if not isinstance(data, dict):
            raise ValueError(f"Block must be an object, got {type(data).__name__}")
        if "ruleArray" not in data:
            raise ValueError("Block has no ruleArray")
        return cls(
            title=str(data.get("title") or ""),
            rule_array=parse_rule_array(data.get("ruleArray")),
            requirement_type=data.get("requirementType"),
            requirement_value=data.get("requirementValue"),
        )
