"""
Validator module - Check persisted trees before they are written.

Provides:
- TreeValidator: Validates prerequisite trees and programs
"""

from .tree_validator import (
    TreeValidator,
    ValidationResult,
    ValidationIssue,
    ValidationSeverity,
)

__all__ = [
    'TreeValidator',
    'ValidationResult',
    'ValidationIssue',
    'ValidationSeverity',
]
