"""Unit tests for validator module."""

import pytest
from reqtree.validator import (
    TreeValidator,
    ValidationResult,
    ValidationIssue,
    ValidationSeverity,
)
from reqtree.parser import PrerequisiteParser
from reqtree.audit import Program, ProgramId, GroupRequirement, MarkerRequirement


COURSE = {"prereqType": "course", "coreq": False, "courseId": "MATH 2A"}
OTHER = {"prereqType": "course", "coreq": False, "courseId": "MATH 5A"}


class TestPrerequisiteTreeValidation:
    """Tests for TreeValidator.validate_prerequisite_tree."""

    @pytest.fixture
    def validator(self):
        return TreeValidator()

    def test_parser_output_is_valid(self, validator):
        tree = PrerequisiteParser().parse("I&C SCI 6B AND ( MATH 2A OR MATH 5A ) AND NO MATH 2B")
        result = validator.validate_prerequisite_tree(tree)
        assert result.valid is True
        assert result.issues == []

    def test_empty_tree_is_valid(self, validator):
        assert validator.validate_prerequisite_tree({}).valid is True

    def test_top_level_not_is_error(self, validator):
        result = validator.validate_prerequisite_tree({"NOT": [COURSE]})
        assert result.valid is False
        assert any(i.code == "UNFOLDED_NOT" for i in result.errors)

    def test_nested_not_is_fine(self, validator):
        result = validator.validate_prerequisite_tree({"AND": [COURSE, {"NOT": [OTHER]}]})
        assert result.valid is True

    def test_empty_list_is_warning(self, validator):
        result = validator.validate_prerequisite_tree({"AND": [COURSE], "OR": []})
        assert result.valid is True
        assert [i.code for i in result.warnings] == ["EMPTY_TREE_LIST"]
        assert result.warnings[0].path == "$.OR"

    def test_uncollapsed_or_is_warning(self, validator):
        result = validator.validate_prerequisite_tree({"AND": [{"OR": [COURSE, OTHER]}]})
        assert any(i.code == "UNCOLLAPSED_OR" for i in result.warnings)

    def test_invalid_leaf_is_error(self, validator):
        result = validator.validate_prerequisite_tree({"AND": [{"prereqType": "essay"}]})
        assert result.errors[0].code == "INVALID_PREREQUISITE"
        assert result.errors[0].path == "$.AND[0]"

    def test_unknown_key_is_error(self, validator):
        result = validator.validate_prerequisite_tree({"XOR": [COURSE]})
        assert any(i.code == "UNKNOWN_TREE_KEY" for i in result.errors)

    def test_non_list_branch_is_error(self, validator):
        result = validator.validate_prerequisite_tree({"AND": COURSE})
        assert any(i.code == "INVALID_TREE_LIST" for i in result.errors)

    def test_non_object_tree(self, validator):
        assert validator.validate_prerequisite_tree(["AND"]).valid is False

    def test_strict_mode_fails_on_warnings(self):
        result = TreeValidator(strict_mode=True).validate_prerequisite_tree({"AND": [COURSE], "OR": []})
        assert result.valid is False


class TestProgramValidation:
    """Tests for TreeValidator.validate_program."""

    @pytest.fixture
    def validator(self):
        return TreeValidator()

    @pytest.fixture
    def program(self):
        return {
            "school": "U",
            "programType": "MAJOR",
            "code": "201",
            "degreeType": "BS",
            "name": "Computer Science",
            "requirements": [
                {
                    "label": "Pick one",
                    "requirementType": "Group",
                    "requirementCount": 1,
                    "requirements": [
                        {"label": "Core", "requirementType": "Course", "courseCount": 1, "courses": ["MATH2A"]},
                        {"label": "Writing", "requirementType": "Marker"},
                    ],
                },
                {"label": "Units", "requirementType": "Unit", "unitCount": 8, "courses": []},
            ],
            "specs": [],
        }

    def test_valid_program(self, validator, program):
        result = validator.validate_program(program)
        assert result.valid is True
        assert result.issues == []

    def test_accepts_program_value(self, validator):
        program = Program(ProgramId.parse("U-MAJOR-201-BS"), "CS", [MarkerRequirement("Done")])
        assert validator.validate_program(program).valid is True

    def test_incomplete_identifier_is_error(self, validator):
        program = Program(ProgramId.parse("U-MAJOR"), "CS")
        result = validator.validate_program(program)
        assert result.valid is False
        assert result.errors[0].code == "MALFORMED_BLOCK_IDENTIFIER"
        assert result.errors[0].context["missing"] == ["code"]

    def test_negative_count_is_error(self, validator, program):
        program["requirements"][1]["unitCount"] = -4
        result = validator.validate_program(program)
        assert result.errors[0].code == "INVALID_COUNT"
        assert result.errors[0].path == "$.requirements[1].unitCount"

    def test_unsatisfiable_group_is_warning(self, validator):
        program = Program(
            ProgramId.parse("U-MAJOR-201-BS"),
            "CS",
            [GroupRequirement("Two of", 2, [MarkerRequirement("Only")])],
        )
        result = validator.validate_program(program)
        assert result.valid is True
        assert result.warnings[0].code == "UNSATISFIABLE_GROUP"

    def test_nested_requirements_are_checked(self, validator, program):
        program["requirements"][0]["requirements"][0]["courseCount"] = "1"
        result = validator.validate_program(program)
        assert result.errors[0].path == "$.requirements[0].requirements[0].courseCount"

    def test_unknown_requirement_type(self, validator, program):
        program["requirements"].append({"label": "?", "requirementType": "Essay"})
        result = validator.validate_program(program)
        assert any(i.code == "UNKNOWN_REQUIREMENT_TYPE" for i in result.errors)


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_merge(self):
        warning = ValidationIssue("W", "warn", ValidationSeverity.WARNING)
        error = ValidationIssue("E", "err", ValidationSeverity.ERROR)
        merged = ValidationResult(True, [warning]).merge(ValidationResult(False, [error]))
        assert merged.valid is False
        assert merged.errors == [error]
        assert merged.warnings == [warning]

    def test_to_dict(self):
        result = ValidationResult(False, [ValidationIssue("E", "err", ValidationSeverity.ERROR, path="$.AND")])
        data = result.to_dict()
        assert data["error_count"] == 1
        assert data["warning_count"] == 0
        assert data["issues"][0]["path"] == "$.AND"
