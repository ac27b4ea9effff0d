"""
Course Catalog - Read-only ground truth for course reference resolution.

The resolver only needs two questions answered: "which courses does this
department offer?" and "does this exact course exist?". CatalogLookup is
that narrow capability; InMemoryCatalog answers it from a snapshot so
resolution can run (and be tested) without a database.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from ..utils.logger import get_logger

logger = get_logger(__name__)


class CatalogLookupError(RuntimeError):
    """A catalog backend could not answer a lookup."""


def numeric_part(course_number: str) -> Optional[int]:
    """Digits of a course number with letters dropped ("H2A" -> 2)."""
    digits = re.sub(r'\D', '', course_number or "")
    return int(digits) if digits else None


@dataclass(frozen=True)
class CatalogCourse:
    """
    One catalog course.

    `id` is the shortened department followed by the course number
    ("I&CSCI32A"); `department` keeps its spaces ("I&C SCI").
    """
    id: str
    department: str
    course_number: str
    course_numeric: int
    min_units: float
    max_units: float

    @property
    def shortened_dept(self) -> str:
        return self.department.replace(" ", "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CatalogCourse':
        """
        Build from a catalog record (camelCase keys).

        `id` and `courseNumeric` are derived when absent; `maxUnits`
        defaults to `minUnits`.

        Raises:
            ValueError: If department or courseNumber is missing
        """
        department = data.get("department")
        course_number = data.get("courseNumber")
        if not department or not course_number:
            raise ValueError(f"Catalog course needs department and courseNumber: {data!r}")

        course_numeric = data.get("courseNumeric")
        if course_numeric is None:
            course_numeric = numeric_part(course_number) or 0

        min_units = float(data.get("minUnits") or 0)
        max_units = float(data.get("maxUnits") if data.get("maxUnits") is not None else min_units)

        return cls(
            id=data.get("id") or f"{department.replace(' ', '')}{course_number}",
            department=department,
            course_number=course_number,
            course_numeric=int(course_numeric),
            min_units=min_units,
            max_units=max_units,
        )

    def sort_key(self):
        """Order by department, then numeric part, then full course number."""
        return (self.department, self.course_numeric, self.course_number)


class CatalogLookup(ABC):
    """
    Capability the course reference resolver consumes.

    Backends that cannot answer raise CatalogLookupError; resolution does
    not catch it.
    """

    @abstractmethod
    def department_courses(self, department: str) -> List[CatalogCourse]:
        """All courses whose shortened department equals `department`."""
        pass

    @abstractmethod
    def course_by_id(self, course_id: str) -> Optional[CatalogCourse]:
        """The course with exactly this id, if any."""
        pass


class InMemoryCatalog(CatalogLookup):
    """Catalog snapshot held in memory."""

    def __init__(self, courses: Iterable[CatalogCourse] = ()):
        self._by_id: Dict[str, CatalogCourse] = {}
        self._by_dept: Dict[str, List[CatalogCourse]] = {}
        for course in courses:
            if course.id in self._by_id:
                logger.warning(f"Duplicate catalog course {course.id}, keeping the first")
                continue
            self._by_id[course.id] = course
            self._by_dept.setdefault(course.shortened_dept, []).append(course)

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]]) -> 'InMemoryCatalog':
        return cls(CatalogCourse.from_dict(r) for r in records)

    @classmethod
    def from_file(cls, path: Path | str) -> 'InMemoryCatalog':
        """
        Load a catalog snapshot from JSON or YAML.

        The file holds a list of course records, or an object with a
        "courses" list.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the content is not a list of records
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog file not found: {path}")

        text = path.read_text(encoding='utf-8')
        try:
            if path.suffix.lower() in ('.yaml', '.yml'):
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Could not decode catalog {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("courses")
        if not isinstance(data, list):
            raise ValueError(f"Catalog {path} must contain a list of courses")

        catalog = cls.from_records(data)
        logger.info(f"Loaded {len(catalog)} catalog courses from {path}")
        return catalog

    def department_courses(self, department: str) -> List[CatalogCourse]:
        return list(self._by_dept.get(department.replace(" ", ""), []))

    def course_by_id(self, course_id: str) -> Optional[CatalogCourse]:
        return self._by_id.get(course_id)

    def __len__(self) -> int:
        return len(self._by_id)
