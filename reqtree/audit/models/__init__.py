"""
Audit Models - Degree-audit rule input and requirement tree output.
"""

from .rules import (
    # Enums
    RuleType,
    WithOperator,
    # Rule input
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
)
from .requirements import (
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

__all__ = [
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
]
