"""
Tree Validator - Checks persisted trees before they are written.

Works on the persisted (dict) form, so it catches both engine output
that slipped past normalization and hand-edited or older stored rows.

Prerequisite trees:
1. Structure - known keys, lists only, decodable leaves
2. Normalization - no unfolded NOT, no empty lists, no uncollapsed OR

Programs:
1. Identifier - school, program type and code present
2. Requirements - known types, non-negative counts, satisfiable groups
"""

from typing import Dict, Any, List, Union
from dataclasses import dataclass, field
from enum import Enum

from ..audit.models import Program, RequirementType
from ..parser.models import PrerequisiteTree, prerequisite_from_dict
from ..utils.logger import get_logger

logger = get_logger(__name__)

TREE_KEYS = PrerequisiteTree.KEYS

COUNT_FIELDS = {
    RequirementType.COURSE.value: "courseCount",
    RequirementType.UNIT.value: "unitCount",
    RequirementType.GROUP.value: "requirementCount",
}


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"       # Must be fixed before persisting
    WARNING = "warning"   # Persistable, but not canonical
    INFO = "info"         # Informational


@dataclass
class ValidationIssue:
    """A single validation issue."""
    code: str
    message: str
    severity: ValidationSeverity
    path: str = ""  # JSON path to the issue
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "path": self.path,
            "context": self.context,
        }


@dataclass
class ValidationResult:
    """Result of validation process."""
    valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def merge(self, other: 'ValidationResult') -> 'ValidationResult':
        return ValidationResult(valid=self.valid and other.valid, issues=self.issues + other.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "issues": [i.to_dict() for i in self.issues],
        }


class TreeValidator:
    """
    Validator for persisted prerequisite trees and programs.

    Validates:
    - Tree and requirement shapes decode
    - Normalization invariants hold
    - Program identifiers are complete
    - Requirement counts are satisfiable
    """

    def __init__(self, strict_mode: bool = False):
        """
        Initialize validator.

        Args:
            strict_mode: If True, warnings are treated as errors
        """
        self.strict_mode = strict_mode

    def validate_prerequisite_tree(
        self,
        tree: Union[PrerequisiteTree, Dict[str, Any]],
        path: str = "$",
    ) -> ValidationResult:
        """
        Validate one prerequisite tree.

        Args:
            tree: A PrerequisiteTree or its persisted form
            path: JSON path of the tree, for issue reports

        Returns:
            ValidationResult with all issues found
        """
        data = tree.to_dict() if isinstance(tree, PrerequisiteTree) else tree
        issues: List[ValidationIssue] = []

        if not isinstance(data, dict):
            issues.append(ValidationIssue(
                code="INVALID_TREE",
                message=f"Prerequisite tree must be an object, got {type(data).__name__}",
                severity=ValidationSeverity.ERROR,
                path=path,
            ))
            return self._result(issues)

        # Stage 1: Structure
        issues.extend(self._validate_tree_node(data, path))

        # Stage 2: Normalization of the root
        issues.extend(self._validate_tree_root(data, path))

        return self._result(issues)

    def _validate_tree_node(self, node: Dict[str, Any], path: str) -> List[ValidationIssue]:
        issues = []

        for key in node:
            if key not in TREE_KEYS:
                issues.append(ValidationIssue(
                    code="UNKNOWN_TREE_KEY",
                    message=f"Unknown prerequisite tree key: {key}",
                    severity=ValidationSeverity.ERROR,
                    path=f"{path}.{key}",
                ))

        for key in TREE_KEYS:
            if key not in node:
                continue
            members = node[key]
            if not isinstance(members, list):
                issues.append(ValidationIssue(
                    code="INVALID_TREE_LIST",
                    message=f"{key} must be a list",
                    severity=ValidationSeverity.ERROR,
                    path=f"{path}.{key}",
                ))
                continue
            if not members:
                issues.append(ValidationIssue(
                    code="EMPTY_TREE_LIST",
                    message=f"Empty {key} list should be omitted",
                    severity=ValidationSeverity.WARNING,
                    path=f"{path}.{key}",
                ))
            for i, member in enumerate(members):
                issues.extend(self._validate_tree_member(member, f"{path}.{key}[{i}]"))

        return issues

    def _validate_tree_member(self, member: Any, path: str) -> List[ValidationIssue]:
        if isinstance(member, dict) and "prereqType" not in member:
            return self._validate_tree_node(member, path)
        try:
            prerequisite_from_dict(member)
        except (ValueError, TypeError, AttributeError) as e:
            return [ValidationIssue(
                code="INVALID_PREREQUISITE",
                message=str(e),
                severity=ValidationSeverity.ERROR,
                path=path,
            )]
        return []

    def _validate_tree_root(self, data: Dict[str, Any], path: str) -> List[ValidationIssue]:
        issues = []

        if data.get("NOT"):
            issues.append(ValidationIssue(
                code="UNFOLDED_NOT",
                message="Top-level NOT must be folded into an AND branch",
                severity=ValidationSeverity.ERROR,
                path=f"{path}.NOT",
            ))

        all_of = data.get("AND")
        if isinstance(all_of, list) and len(all_of) == 1 and not data.get("OR") and not data.get("NOT"):
            only = all_of[0]
            if isinstance(only, dict) and set(only) == {"OR"}:
                issues.append(ValidationIssue(
                    code="UNCOLLAPSED_OR",
                    message="AND of a single OR should be the bare OR",
                    severity=ValidationSeverity.WARNING,
                    path=f"{path}.AND[0]",
                ))

        return issues

    def validate_program(self, program: Union[Program, Dict[str, Any]], path: str = "$") -> ValidationResult:
        """
        Validate one program and its requirement tree.

        Args:
            program: A Program or its persisted form
            path: JSON path of the program, for issue reports

        Returns:
            ValidationResult with all issues found
        """
        data = program.to_dict() if isinstance(program, Program) else program
        issues: List[ValidationIssue] = []

        # Stage 1: Identifier
        missing = [k for k in ("school", "programType", "code") if not data.get(k)]
        if missing:
            issues.append(ValidationIssue(
                code="MALFORMED_BLOCK_IDENTIFIER",
                message=f"Program identifier is missing: {', '.join(missing)}",
                severity=ValidationSeverity.ERROR,
                path=path,
                context={"missing": missing},
            ))

        # Stage 2: Requirements
        requirements = data.get("requirements") or []
        for i, requirement in enumerate(requirements):
            issues.extend(self._validate_requirement(requirement, f"{path}.requirements[{i}]"))

        result = self._result(issues)
        if not result.valid:
            logger.debug(f"Program {data.get('code')} failed validation with {len(result.errors)} errors")
        return result

    def _validate_requirement(self, requirement: Dict[str, Any], path: str) -> List[ValidationIssue]:
        issues = []
        requirement_type = requirement.get("requirementType")

        if requirement_type == RequirementType.MARKER.value:
            return issues

        count_field = COUNT_FIELDS.get(requirement_type)
        if count_field is None:
            issues.append(ValidationIssue(
                code="UNKNOWN_REQUIREMENT_TYPE",
                message=f"Unknown requirementType: {requirement_type!r}",
                severity=ValidationSeverity.ERROR,
                path=f"{path}.requirementType",
            ))
            return issues

        count = requirement.get(count_field)
        if not isinstance(count, int) or count < 0:
            issues.append(ValidationIssue(
                code="INVALID_COUNT",
                message=f"{count_field} must be a non-negative integer, got {count!r}",
                severity=ValidationSeverity.ERROR,
                path=f"{path}.{count_field}",
            ))

        if requirement_type == RequirementType.GROUP.value:
            children = requirement.get("requirements") or []
            if isinstance(count, int) and count > len(children):
                issues.append(ValidationIssue(
                    code="UNSATISFIABLE_GROUP",
                    message=f"Group requires {count} of only {len(children)} requirements",
                    severity=ValidationSeverity.WARNING,
                    path=path,
                    context={"label": requirement.get("label"), "count": count, "children": len(children)},
                ))
            for i, child in enumerate(children):
                issues.extend(self._validate_requirement(child, f"{path}.requirements[{i}]"))

        return issues

    def _result(self, issues: List[ValidationIssue]) -> ValidationResult:
        has_errors = any(i.severity == ValidationSeverity.ERROR for i in issues)
        has_warnings = any(i.severity == ValidationSeverity.WARNING for i in issues)

        valid = not has_errors
        if self.strict_mode and has_warnings:
            valid = False

        return ValidationResult(valid=valid, issues=issues)
