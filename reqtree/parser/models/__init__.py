"""
Prerequisite Models - Data structures for parsed prerequisite trees.
"""

from .prerequisite import (
    # Enums
    PrereqType,
    # Leaves
    CoursePrerequisite,
    CourseCorequisite,
    ExamPrerequisite,
    Prerequisite,
    # Tree
    PrerequisiteTree,
    TreeMember,
    PrerequisiteEdge,
    # Helpers
    is_prerequisite,
    prerequisite_from_dict,
)

__all__ = [
    'PrereqType',
    'CoursePrerequisite',
    'CourseCorequisite',
    'ExamPrerequisite',
    'Prerequisite',
    'PrerequisiteTree',
    'TreeMember',
    'PrerequisiteEdge',
    'is_prerequisite',
    'prerequisite_from_dict',
]
