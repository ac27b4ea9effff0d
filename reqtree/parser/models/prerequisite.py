"""
Prerequisite Data Models - Leaves and the recursive prerequisite tree.

The tree keeps the optional-list shape of its persisted form: a node
holds up to three lists (AND, OR, NOT) and an empty list means the same
thing as an absent one. All values are immutable once built.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterator, Optional, Tuple, Union
from enum import Enum


class PrereqType(Enum):
    """Discriminator of the persisted leaf form."""
    COURSE = "course"
    EXAM = "exam"


@dataclass(frozen=True)
class CoursePrerequisite:
    """A course that must be completed beforehand."""
    course_id: str
    min_grade: Optional[str] = None

    prereq_type: ClassVar[PrereqType] = PrereqType.COURSE
    coreq: ClassVar[bool] = False

    @property
    def reference_id(self) -> str:
        """Id used in the dependency-edge table (spaces removed)."""
        return self.course_id.replace(" ", "")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "prereqType": self.prereq_type.value,
            "coreq": False,
            "courseId": self.course_id,
        }
        if self.min_grade is not None:
            data["minGrade"] = self.min_grade
        return data


@dataclass(frozen=True)
class CourseCorequisite:
    """A course that may be taken concurrently."""
    course_id: str

    prereq_type: ClassVar[PrereqType] = PrereqType.COURSE
    coreq: ClassVar[bool] = True

    @property
    def reference_id(self) -> str:
        return self.course_id.replace(" ", "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prereqType": self.prereq_type.value,
            "coreq": True,
            "courseId": self.course_id,
        }


@dataclass(frozen=True)
class ExamPrerequisite:
    """A placement or AP exam, optionally with a minimum score."""
    exam_name: str
    min_grade: Optional[str] = None

    prereq_type: ClassVar[PrereqType] = PrereqType.EXAM

    @property
    def reference_id(self) -> str:
        return self.exam_name

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "prereqType": self.prereq_type.value,
            "examName": self.exam_name,
        }
        if self.min_grade is not None:
            data["minGrade"] = self.min_grade
        return data


Prerequisite = Union[CoursePrerequisite, CourseCorequisite, ExamPrerequisite]
PREREQUISITE_TYPES = (CoursePrerequisite, CourseCorequisite, ExamPrerequisite)


def is_prerequisite(node: Any) -> bool:
    """Whether a tree member is a leaf rather than a subtree."""
    return isinstance(node, PREREQUISITE_TYPES)


def prerequisite_from_dict(data: Dict[str, Any]) -> Prerequisite:
    """
    Decode a persisted leaf.

    Raises:
        ValueError: If the prereqType is unknown or required keys are missing
    """
    prereq_type = data.get("prereqType")
    try:
        if prereq_type == PrereqType.COURSE.value:
            if data.get("coreq"):
                return CourseCorequisite(course_id=data["courseId"])
            return CoursePrerequisite(course_id=data["courseId"], min_grade=data.get("minGrade"))
        if prereq_type == PrereqType.EXAM.value:
            return ExamPrerequisite(exam_name=data["examName"], min_grade=data.get("minGrade"))
    except KeyError as e:
        raise ValueError(f"Prerequisite is missing field {e}: {data!r}") from e
    raise ValueError(f"Unknown prereqType: {prereq_type!r}")


@dataclass(frozen=True)
class PrerequisiteTree:
    """
    Recursive AND/OR/NOT node.

    `all_of`, `any_of` and `none_of` persist as the AND, OR and NOT keys.
    """
    all_of: Tuple["TreeMember", ...] = field(default_factory=tuple)
    any_of: Tuple["TreeMember", ...] = field(default_factory=tuple)
    none_of: Tuple["TreeMember", ...] = field(default_factory=tuple)

    KEYS: ClassVar[Tuple[str, str, str]] = ("AND", "OR", "NOT")

    def __post_init__(self):
        # Accept lists from callers but store tuples so trees stay hashable values
        object.__setattr__(self, "all_of", tuple(self.all_of))
        object.__setattr__(self, "any_of", tuple(self.any_of))
        object.__setattr__(self, "none_of", tuple(self.none_of))

    @property
    def is_empty(self) -> bool:
        """An empty tree imposes no constraint."""
        return not (self.all_of or self.any_of or self.none_of)

    @property
    def is_pure_or(self) -> bool:
        return bool(self.any_of) and not self.all_of and not self.none_of

    def branches(self) -> Iterator[Tuple[str, Tuple["TreeMember", ...]]]:
        """Yield (key, members) for every non-empty list, in AND, OR, NOT order."""
        for key, members in zip(self.KEYS, (self.all_of, self.any_of, self.none_of)):
            if members:
                yield key, members

    def to_dict(self) -> Dict[str, Any]:
        """Sparse persisted form; empty lists are omitted."""
        return {
            key: [member.to_dict() for member in members]
            for key, members in self.branches()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PrerequisiteTree':
        """
        Decode a persisted tree.

        Raises:
            ValueError: If the data has keys other than AND/OR/NOT or malformed leaves
        """
        if not isinstance(data, dict):
            raise ValueError(f"Prerequisite tree must be an object, got {type(data).__name__}")
        unknown = set(data) - set(cls.KEYS)
        if unknown:
            raise ValueError(f"Unknown prerequisite tree keys: {sorted(unknown)}")

        def decode(member: Dict[str, Any]) -> TreeMember:
            if "prereqType" in member:
                return prerequisite_from_dict(member)
            return cls.from_dict(member)

        return cls(
            all_of=tuple(decode(m) for m in data.get("AND") or []),
            any_of=tuple(decode(m) for m in data.get("OR") or []),
            none_of=tuple(decode(m) for m in data.get("NOT") or []),
        )


TreeMember = Union[Prerequisite, PrerequisiteTree]


@dataclass(frozen=True, order=True)
class PrerequisiteEdge:
    """One row of the course dependency-edge table."""
    dependency_id: str
    prerequisite_id: str
    dependency_dept: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "prerequisiteId": self.prerequisite_id,
            "dependencyId": self.dependency_id,
            "dependencyDept": self.dependency_dept,
        }

