"""
Program helpers - Match specializations to the majors that offer them.

The audit service lists specializations without saying which major each
belongs to. By convention a specialization code is its major's code
followed by one uppercase letter ("CSE" -> "CSEA"), which narrows the
search before any per-major audit is requested.
"""

import re
from dataclasses import replace
from typing import Iterable, List, Mapping, Tuple

from .models import Program
from ..utils.logger import get_logger

logger = get_logger(__name__)

SUFFIXED_MAJOR_CODE = re.compile(r'^(.+)[A-Z]$')
SPECIALIZATION_PROGRAM_TYPE = "SPEC"


def specialization_parent_candidates(
    spec_code: str,
    programs: Mapping[str, Program],
) -> List[Tuple[str, Program]]:
    """
    Programs that may own a specialization.

    Args:
        spec_code: Specialization code, e.g. "CSEA"
        programs: Parsed programs keyed by block id

    Returns:
        (block id, program) pairs whose code is `spec_code` without its
        final uppercase letter; empty when the code has no such suffix
    """
    match = SUFFIXED_MAJOR_CODE.match(spec_code)
    if not match:
        logger.debug(f"Specialization code {spec_code} does not follow the major-code convention")
        return []

    major_code = match.group(1)
    return [(block_id, p) for block_id, p in programs.items() if p.code == major_code]


def specialization_block_id(parent: Program, spec_code: str) -> str:
    """Block id under which a specialization of `parent` is stored."""
    parts = [parent.program_id.school, SPECIALIZATION_PROGRAM_TYPE, spec_code, parent.program_id.degree_type]
    return "-".join(p for p in parts if p)


def attach_specializations(parent: Program, spec_codes: Iterable[str]) -> Program:
    """Copy of `parent` with the specialization codes added, sorted and without repeats."""
    return replace(parent, specs=sorted(set(parent.specs).union(spec_codes)))
