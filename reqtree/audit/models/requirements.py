"""
Requirement Models - Canonical requirement trees and the programs that own them.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union
from enum import Enum


class RequirementType(Enum):
    """Discriminator of the persisted requirement form."""
    COURSE = "Course"
    UNIT = "Unit"
    GROUP = "Group"
    MARKER = "Marker"


@dataclass(frozen=True)
class CourseRequirement:
    """Complete `course_count` of the listed courses."""
    label: str
    course_count: int
    courses: Tuple[str, ...] = field(default_factory=tuple)

    requirement_type: ClassVar[RequirementType] = RequirementType.COURSE

    def __post_init__(self):
        object.__setattr__(self, "courses", tuple(self.courses))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "requirementType": self.requirement_type.value,
            "courseCount": self.course_count,
            "courses": list(self.courses),
        }


@dataclass(frozen=True)
class UnitRequirement:
    """Earn `unit_count` units from the listed courses."""
    label: str
    unit_count: int
    courses: Tuple[str, ...] = field(default_factory=tuple)

    requirement_type: ClassVar[RequirementType] = RequirementType.UNIT

    def __post_init__(self):
        object.__setattr__(self, "courses", tuple(self.courses))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "requirementType": self.requirement_type.value,
            "unitCount": self.unit_count,
            "courses": list(self.courses),
        }


@dataclass(frozen=True)
class GroupRequirement:
    """Satisfy `requirement_count` of the nested requirements."""
    label: str
    requirement_count: int
    requirements: Tuple["Requirement", ...] = field(default_factory=tuple)

    requirement_type: ClassVar[RequirementType] = RequirementType.GROUP

    def __post_init__(self):
        object.__setattr__(self, "requirements", tuple(self.requirements))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "requirementType": self.requirement_type.value,
            "requirementCount": self.requirement_count,
            "requirements": [r.to_dict() for r in self.requirements],
        }


@dataclass(frozen=True)
class MarkerRequirement:
    """A requirement marked complete by an advisor rather than by courses."""
    label: str

    requirement_type: ClassVar[RequirementType] = RequirementType.MARKER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "requirementType": self.requirement_type.value,
        }


Requirement = Union[CourseRequirement, UnitRequirement, GroupRequirement, MarkerRequirement]


def requirement_from_dict(data: Dict[str, Any]) -> Requirement:
    """
    Decode a persisted requirement.

    Raises:
        ValueError: If the requirementType is unknown or a field is missing
    """
    try:
        requirement_type = RequirementType(data.get("requirementType"))
    except ValueError as e:
        raise ValueError(f"Unknown requirementType: {data.get('requirementType')!r}") from e

    try:
        label = data["label"]
        if requirement_type == RequirementType.COURSE:
            return CourseRequirement(label, int(data["courseCount"]), tuple(data.get("courses") or ()))
        if requirement_type == RequirementType.UNIT:
            return UnitRequirement(label, int(data["unitCount"]), tuple(data.get("courses") or ()))
        if requirement_type == RequirementType.GROUP:
            return GroupRequirement(
                label,
                int(data["requirementCount"]),
                tuple(requirement_from_dict(r) for r in data.get("requirements") or ()),
            )
        return MarkerRequirement(label)
    except KeyError as e:
        raise ValueError(f"{requirement_type.value} requirement is missing field {e}") from e


def requirements_to_list(requirements: List[Requirement]) -> List[Dict[str, Any]]:
    return [r.to_dict() for r in requirements]


@dataclass(frozen=True)
class ProgramId:
    """
    Structured form of "<school>-<programType>-<code>[-<degreeType>]".

    Fields missing from a short identifier are None.
    """
    school: Optional[str] = None
    program_type: Optional[str] = None
    code: Optional[str] = None
    degree_type: Optional[str] = None

    @classmethod
    def parse(cls, block_id: str) -> 'ProgramId':
        segments = (block_id or "").split("-")
        padded = [s or None for s in segments] + [None] * 4
        return cls(*padded[:4])

    @property
    def is_complete(self) -> bool:
        """School, program type and code are all present."""
        return all((self.school, self.program_type, self.code))

    def to_block_id(self) -> str:
        parts = [self.school, self.program_type, self.code, self.degree_type]
        return "-".join(p for p in parts if p)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "school": self.school,
            "programType": self.program_type,
            "code": self.code,
            "degreeType": self.degree_type,
        }


@dataclass
class Program:
    """
    A resolved requirement block together with its identifier.

    `specs` lists specialization codes; when non-empty exactly one must
    be chosen. It starts empty and is filled in once specializations
    have been matched to their parent programs.
    """
    program_id: ProgramId
    name: str
    requirements: List[Requirement] = field(default_factory=list)
    specs: List[str] = field(default_factory=list)

    @property
    def code(self) -> Optional[str]:
        return self.program_id.code

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.program_id.to_dict(),
            "name": self.name,
            "requirements": requirements_to_list(self.requirements),
            "specs": list(self.specs),
        }
