"""
Audit module - Resolve degree-audit rule arrays into requirement trees.
"""

from .models import (
    RuleType,
    WithOperator,
    WithClause,
    CourseReference,
    GroupRule,
    CourseRule,
    IfStmtRule,
    BlockRule,
    NoncourseRule,
    MarkerRule,
    SubsetRule,
    UnknownRule,
    MalformedRule,
    RuleNode,
    Block,
    parse_rule,
    parse_rule_array,
    RequirementType,
    CourseRequirement,
    UnitRequirement,
    GroupRequirement,
    MarkerRequirement,
    Requirement,
    ProgramId,
    Program,
    requirement_from_dict,
    requirements_to_list,
)
from .catalog import CatalogCourse, CatalogLookup, CatalogLookupError, InMemoryCatalog
from .course_resolver import CourseReferenceResolver, wildcard_to_regex
from .labels import normalize_label
from .rule_walker import AuditRuleResolver, ResolutionResult, flatten_if_stmt
from .programs import (
    specialization_parent_candidates,
    specialization_block_id,
    attach_specializations,
)

__all__ = [
    # Rule input
    'RuleType',
    'WithOperator',
    'WithClause',
    'CourseReference',
    'GroupRule',
    'CourseRule',
    'IfStmtRule',
    'BlockRule',
    'NoncourseRule',
    'MarkerRule',
    'SubsetRule',
    'UnknownRule',
    'MalformedRule',
    'RuleNode',
    'Block',
    'parse_rule',
    'parse_rule_array',
    # Requirements
    'RequirementType',
    'CourseRequirement',
    'UnitRequirement',
    'GroupRequirement',
    'MarkerRequirement',
    'Requirement',
    'ProgramId',
    'Program',
    'requirement_from_dict',
    'requirements_to_list',
    # Catalog
    'CatalogCourse',
    'CatalogLookup',
    'CatalogLookupError',
    'InMemoryCatalog',
    # Resolution
    'CourseReferenceResolver',
    'wildcard_to_regex',
    'normalize_label',
    'AuditRuleResolver',
    'ResolutionResult',
    'flatten_if_stmt',
    # Programs
    'specialization_parent_candidates',
    'specialization_block_id',
    'attach_specializations',
]
