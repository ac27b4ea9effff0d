"""
Course Reference Resolver - Expand course references against the catalog.

A degree audit names courses loosely:

    {"discipline": "COMPSCI", "number": "161"}        one course
    {"discipline": "COMPSCI", "number": "@"}          the whole department
    {"discipline": "COMPSCI", "number": "1@@"}        COMPSCI 1xx and longer
    {"discipline": "COMPSCI", "number": "100-199"}    numeric range
    {"discipline": "ELECTIVE", "number": "@"}         placeholder, no courses

Each reference resolves to a list of catalog courses, which is then
narrowed by the reference's credit with-clauses. A reference that
matches nothing resolves to an empty list.
"""

import re
from typing import Callable, Dict, List, Optional, Sequence

from .catalog import CatalogCourse, CatalogLookup
from .models import CourseReference, WithClause, WithOperator
from ..core.config import ResolverConfig
from ..core.issues import IssueKind, IssueLog, IssueSeverity
from ..utils.logger import get_logger

logger = get_logger(__name__)

ELECTIVE_PATTERN = re.compile(r'ELECTIVE @+')
WILDCARD_PATTERN = re.compile(r'\w@')
RANGE_PATTERN = re.compile(r'-\w+')
LEADING_INTEGER = re.compile(r'^\s*([+-]?\d+)')
WILDCARD_RUN = re.compile(r'@+')
DEPARTMENT_WILDCARD = "@"
DOCUMENTED_WILDCARD_RUN = 2

# (min_units, max_units, bound) -> qualifies
CreditPredicate = Callable[[float, float, float], bool]

# Lower bounds (>, >=) and "=" are optimistic: a 1-4 unit course passes "> 2"
# because it can be taken for 3 or 4 units. Upper bounds (<, <=) mostly show
# up in except-lists and are strict: a 1-4 unit course fails "< 2", so it is
# not excluded from the requirement.
CREDIT_PREDICATES: Dict[WithOperator, CreditPredicate] = {
    WithOperator.LT: lambda lo, hi, bound: hi < bound,
    WithOperator.LE: lambda lo, hi, bound: hi <= bound,
    WithOperator.EQ: lambda lo, hi, bound: lo <= bound <= hi,
    WithOperator.GT: lambda lo, hi, bound: hi > bound,
    WithOperator.GE: lambda lo, hi, bound: hi >= bound,
}


def wildcard_to_regex(number: str) -> re.Pattern:
    """
    Translate a wildcard course number into an anchored-at-start regex.

    A run of k '@' matches k or more word characters, so "1@" matches
    "10" and "101", and "1@@" matches "101" and "102H" but not "10".
    """
    parts = []
    position = 0
    for run in WILDCARD_RUN.finditer(number):
        parts.append(re.escape(number[position:run.start()]))
        parts.append(rf'\w{{{len(run.group())},}}')
        position = run.end()
    parts.append(re.escape(number[position:]))
    return re.compile("^" + "".join(parts))


def longest_wildcard_run(number: str) -> int:
    return max((len(run.group()) for run in WILDCARD_RUN.finditer(number)), default=0)


def leading_integer(text: str) -> int:
    """
    Integer prefix of a clause value ("2.5" -> 2, "4 units" -> 4).

    Raises:
        ValueError: If the value does not start with digits
    """
    match = LEADING_INTEGER.match(text)
    if not match:
        raise ValueError(f"No integer at the start of {text!r}")
    return int(match.group(1))


def _strip_letters(bound: str) -> int:
    return int(re.sub(r'[A-Za-z]', '', bound))


class CourseReferenceResolver:
    """
    Resolve CourseReference values into catalog courses.

    Holds only the catalog capability and configuration; no state is
    carried between calls.
    """

    def __init__(self, catalog: CatalogLookup, config: Optional[ResolverConfig] = None):
        self.catalog = catalog
        self.config = config or ResolverConfig()

    def resolve(
        self,
        reference: CourseReference,
        with_array: Optional[Sequence[WithClause]] = None,
        issues: Optional[IssueLog] = None,
        path: str = "",
    ) -> List[CatalogCourse]:
        """
        Expand one reference and apply its with-clauses.

        Args:
            reference: The reference to expand
            with_array: Clauses to apply (defaults to the reference's own)
            issues: Collector for unresolved references
            path: Location of the reference, for issue reports

        Returns:
            Matching catalog courses (possibly empty)
        """
        issues = issues if issues is not None else IssueLog()
        courses = self.match(reference, issues, path)

        if not courses and not self.is_elective(reference):
            issues.record(
                IssueKind.UNRESOLVED_REFERENCE,
                f"No catalog course matches {reference.course_id_like}",
                path=path,
                reference=reference.course_id_like,
            )

        clauses = reference.with_array if with_array is None else with_array
        return self.apply_with_clauses(courses, clauses)

    @staticmethod
    def is_elective(reference: CourseReference) -> bool:
        return bool(ELECTIVE_PATTERN.search(reference.course_id_like))

    def match(self, reference: CourseReference, issues: IssueLog, path: str = "") -> List[CatalogCourse]:
        """Catalog courses a reference names, before with-clauses."""
        if self.is_elective(reference):
            return []

        department = reference.discipline.replace(" ", "")
        number = reference.number
        if reference.number_end:
            number = f"{number}-{reference.number_end}"

        if number == DEPARTMENT_WILDCARD:
            return self.catalog.department_courses(department)

        if WILDCARD_PATTERN.search(number):
            return self._match_wildcard(department, number, issues, path)

        if RANGE_PATTERN.search(number):
            return self._match_range(department, number, issues, path)

        course = self.catalog.course_by_id(f"{department}{number}")
        return [course] if course else []

    def _match_wildcard(self, department: str, number: str, issues: IssueLog, path: str) -> List[CatalogCourse]:
        run = longest_wildcard_run(number)
        if run > DOCUMENTED_WILDCARD_RUN:
            strict = self.config.strict_wildcards
            issues.record(
                IssueKind.STRUCTURAL_INVARIANT_VIOLATION,
                f"Wildcard {department} {number} has a run of {run} '@'",
                path=path,
                severity=IssueSeverity.WARNING if strict else IssueSeverity.INFO,
                reference=f"{department} {number}",
            )
            if strict:
                return []
            logger.warning(f"Matching {department} {number} as {run} or more characters")

        pattern = wildcard_to_regex(number)
        return [c for c in self.catalog.department_courses(department) if pattern.match(c.course_number)]

    def _match_range(self, department: str, number: str, issues: IssueLog, path: str) -> List[CatalogCourse]:
        low_text, high_text = (number.split("-") + [""])[:2]
        try:
            low, high = _strip_letters(low_text), _strip_letters(high_text)
        except ValueError:
            issues.record(
                IssueKind.PARSE_AMBIGUITY,
                f"Course range {department} {number} has a non-numeric bound",
                path=path,
                reference=f"{department} {number}",
            )
            return []
        return [
            c for c in self.catalog.department_courses(department)
            if low <= c.course_numeric <= high
        ]

    def apply_with_clauses(self, courses: List[CatalogCourse], with_array: Sequence[WithClause]) -> List[CatalogCourse]:
        """Narrow courses by every credit clause; other clause codes are ignored."""
        filtered = list(courses)
        for clause in with_array:
            if clause.code not in self.config.credit_codes:
                continue
            predicate = credit_predicate(clause)
            filtered = [c for c in filtered if predicate(c.min_units, c.max_units)]
        return filtered


def credit_predicate(clause: WithClause) -> Callable[[float, float], bool]:
    """
    Unit-range test for a credit clause.

    The bound is the integer prefix of the first value, so "2.5" compares
    as 2. Unknown operators and missing or non-numeric values reject every
    course.
    """
    try:
        operator = WithOperator(clause.operator)
        bound = leading_integer(clause.value_list[0])
    except (ValueError, IndexError):
        logger.debug(f"Unusable credit clause {clause}, rejecting all courses")
        return lambda lo, hi: False

    compare = CREDIT_PREDICATES[operator]
    return lambda lo, hi: compare(lo, hi, bound)
