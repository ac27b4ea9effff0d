"""Unit tests for course reference resolution."""

import pytest
from reqtree.audit.catalog import CatalogCourse, InMemoryCatalog
from reqtree.audit.course_resolver import (
    CourseReferenceResolver,
    credit_predicate,
    wildcard_to_regex,
)
from reqtree.audit.models import CourseReference, WithClause
from reqtree.core.config import ResolverConfig
from reqtree.core.issues import IssueKind, IssueLog, IssueSeverity


def make_course(department, number, numeric, min_units=4, max_units=None):
    return CatalogCourse(
        id=f"{department.replace(' ', '')}{number}",
        department=department,
        course_number=number,
        course_numeric=numeric,
        min_units=float(min_units),
        max_units=float(max_units if max_units is not None else min_units),
    )


@pytest.fixture
def catalog():
    return InMemoryCatalog([
        make_course("COMPSCI", "10", 10),
        make_course("COMPSCI", "99", 99),
        make_course("COMPSCI", "100", 100),
        make_course("COMPSCI", "102H", 102),
        make_course("COMPSCI", "150", 150),
        make_course("COMPSCI", "199", 199, min_units=1, max_units=8),
        make_course("COMPSCI", "200", 200),
        make_course("I&C SCI", "32A", 32),
        make_course("I&C SCI", "H32", 32),
        make_course("MATH", "2A", 2),
    ])


@pytest.fixture
def resolver(catalog):
    return CourseReferenceResolver(catalog)


def ids(courses):
    return sorted(c.id for c in courses)


class TestReferenceMatching:
    """Tests for each reference shape."""

    def test_exact_course(self, resolver):
        assert ids(resolver.resolve(CourseReference("COMPSCI", "161"))) == []
        assert ids(resolver.resolve(CourseReference("MATH", "2A"))) == ["MATH2A"]

    def test_exact_course_with_spaced_discipline(self, resolver):
        assert ids(resolver.resolve(CourseReference("I&C SCI", "H32"))) == ["I&CSCIH32"]

    def test_department_wildcard(self, resolver):
        assert ids(resolver.resolve(CourseReference("I&CSCI", "@"))) == ["I&CSCI32A", "I&CSCIH32"]

    def test_double_wildcard_needs_two_characters(self, resolver):
        result = ids(resolver.resolve(CourseReference("COMPSCI", "1@@")))
        assert result == ["COMPSCI100", "COMPSCI102H", "COMPSCI150", "COMPSCI199"]
        assert "COMPSCI10" not in result

    def test_single_wildcard(self, resolver):
        result = ids(resolver.resolve(CourseReference("COMPSCI", "1@")))
        assert result == ["COMPSCI10", "COMPSCI100", "COMPSCI102H", "COMPSCI150", "COMPSCI199"]

    def test_wildcard_is_anchored_at_start(self, resolver):
        assert ids(resolver.resolve(CourseReference("COMPSCI", "9@"))) == ["COMPSCI99"]

    def test_range(self, resolver):
        assert ids(resolver.resolve(CourseReference("COMPSCI", "100-199"))) == [
            "COMPSCI100", "COMPSCI102H", "COMPSCI150", "COMPSCI199",
        ]

    def test_range_with_number_end(self, resolver):
        assert ids(resolver.resolve(CourseReference("COMPSCI", "100", "150"))) == [
            "COMPSCI100", "COMPSCI102H", "COMPSCI150",
        ]

    def test_range_bounds_strip_letters(self, resolver):
        assert ids(resolver.resolve(CourseReference("COMPSCI", "H100-199W"))) == [
            "COMPSCI100", "COMPSCI102H", "COMPSCI150", "COMPSCI199",
        ]

    def test_unparseable_range_is_empty(self, resolver):
        issues = IssueLog()
        assert resolver.resolve(CourseReference("COMPSCI", "ABC-XYZ"), issues=issues) == []
        assert issues.of_kind(IssueKind.PARSE_AMBIGUITY)

    def test_elective_placeholder(self, resolver):
        issues = IssueLog()
        assert resolver.resolve(CourseReference("ELECTIVE", "@@"), issues=issues) == []
        assert len(issues) == 0


class TestUnresolved:
    """Tests for references that match nothing."""

    def test_unknown_course_is_reported(self, resolver):
        issues = IssueLog()
        assert resolver.resolve(CourseReference("COMPSCI", "999"), issues=issues, path="ruleArray[0]") == []
        issue = issues.of_kind(IssueKind.UNRESOLVED_REFERENCE)[0]
        assert issue.path == "ruleArray[0]"
        assert issue.context["reference"] == "COMPSCI 999"

    def test_unknown_department_is_reported(self, resolver):
        issues = IssueLog()
        assert resolver.resolve(CourseReference("ART", "@"), issues=issues) == []
        assert len(issues.of_kind(IssueKind.UNRESOLVED_REFERENCE)) == 1


class TestLongWildcards:
    """Tests for wildcard runs longer than two."""

    def test_regex_translation(self):
        assert wildcard_to_regex("1@@").pattern == r"^1\w{2,}"
        assert wildcard_to_regex("1@@@").pattern == r"^1\w{3,}"
        assert wildcard_to_regex("H@").pattern == r"^H\w{1,}"

    def test_lenient_matches_run_length_or_more(self, resolver):
        issues = IssueLog()
        assert ids(resolver.resolve(CourseReference("COMPSCI", "1@@@"), issues=issues)) == ["COMPSCI102H"]
        issue = issues.of_kind(IssueKind.STRUCTURAL_INVARIANT_VIOLATION)[0]
        assert issue.severity == IssueSeverity.INFO

    def test_strict_resolves_to_nothing(self, catalog):
        resolver = CourseReferenceResolver(catalog, ResolverConfig(strict_wildcards=True))
        issues = IssueLog()
        assert resolver.resolve(CourseReference("COMPSCI", "1@@@"), issues=issues) == []
        assert issues.of_kind(IssueKind.STRUCTURAL_INVARIANT_VIOLATION)[0].severity == IssueSeverity.WARNING


class TestCreditFilter:
    """Tests for with-clause filtering."""

    @pytest.mark.parametrize("operator, value, expected", [
        (">", "2", True),    # 1-8 units can be taken for more than 2
        (">=", "8", True),
        (">", "8", False),
        ("=", "4", True),
        ("=", "9", False),
        ("<", "8", False),   # upper bounds are strict: max 8 is not < 8
        ("<=", "8", True),
        ("<", "9", True),
    ])
    def test_variable_unit_course(self, operator, value, expected):
        predicate = credit_predicate(WithClause("DWCREDIT", operator, (value,)))
        assert predicate(1.0, 8.0) is expected

    def test_unknown_operator_rejects_everything(self):
        assert credit_predicate(WithClause("DWCREDIT", "<>", ("4",)))(1.0, 8.0) is False

    def test_missing_value_rejects_everything(self):
        assert credit_predicate(WithClause("DWCREDIT", ">", ()))(1.0, 8.0) is False

    @pytest.mark.parametrize("operator, value, units, expected", [
        ("<", "8.5", (1.0, 8.0), False),   # compares as 8
        ("=", "4.5", (4.0, 4.0), True),    # compares as 4
        (">", "8 units", (1.0, 8.0), False),
    ])
    def test_bound_is_integer_prefix(self, operator, value, units, expected):
        predicate = credit_predicate(WithClause("DWCREDIT", operator, (value,)))
        assert predicate(*units) is expected

    def test_non_numeric_value_rejects_everything(self):
        assert credit_predicate(WithClause("DWCREDIT", ">", ("units",)))(1.0, 8.0) is False

    def test_scalar_value_list_from_audit_json(self, resolver):
        reference = CourseReference.from_dict({
            "discipline": "COMPSCI",
            "number": "1@@",
            "withArray": [{"code": "DWCREDIT", "operator": ">", "valueList": "4"}],
        })
        assert ids(resolver.resolve(reference)) == ["COMPSCI199"]

    def test_filter_applies_to_references(self, resolver):
        reference = CourseReference(
            "COMPSCI", "1@@",
            with_array=(WithClause("DWCREDITS", ">", ("4",)),),
        )
        assert ids(resolver.resolve(reference)) == ["COMPSCI199"]

    def test_explicit_with_array_overrides_reference(self, resolver):
        reference = CourseReference("COMPSCI", "1@@", with_array=(WithClause("DWCREDIT", ">", ("4",)),))
        assert len(resolver.resolve(reference, with_array=())) == 4

    def test_other_codes_are_ignored(self, resolver):
        reference = CourseReference("COMPSCI", "1@@", with_array=(WithClause("DWTERM", "=", ("2025 SPRING",)),))
        assert len(resolver.resolve(reference)) == 4

    def test_clauses_combine(self, resolver):
        reference = CourseReference("COMPSCI", "1@@", with_array=(
            WithClause("DWCREDIT", ">=", ("4",)),
            WithClause("DWCREDIT", "<=", ("4",)),
        ))
        assert ids(resolver.resolve(reference)) == ["COMPSCI100", "COMPSCI102H", "COMPSCI150"]
