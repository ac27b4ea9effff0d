"""
Parser module - Build prerequisite trees from catalogue text.
"""

from .models import (
    PrereqType,
    CoursePrerequisite,
    CourseCorequisite,
    ExamPrerequisite,
    Prerequisite,
    PrerequisiteTree,
    TreeMember,
    PrerequisiteEdge,
    is_prerequisite,
    prerequisite_from_dict,
)
from .classifier import LeafClassifier, ClassifiedLeaf
from .prereq_parser import (
    PrerequisiteParser,
    ParseResult,
    flatten_prerequisites,
    prerequisite_edges,
    patch_equivalent_courses,
)

__all__ = [
    # Models
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
    # Classifier
    'LeafClassifier',
    'ClassifiedLeaf',
    # Parser
    'PrerequisiteParser',
    'ParseResult',
    'flatten_prerequisites',
    'prerequisite_edges',
    'patch_equivalent_courses',
]
