"""
Label Normalizer - Make requirement labels independent of audit progress.

The audit service words a label by the student's progress ("Lower
Division Satisfied" once complete). Stored requirements describe the
requirement itself, so the completed wording is mapped back.
"""

from typing import Tuple

LABEL_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    (" Satisfied", " Required"),
    (" satisfied", " required"),
)


def normalize_label(label: str) -> str:
    """Replace every " Satisfied"/" satisfied" with " Required"/" required"."""
    for completed, required in LABEL_REPLACEMENTS:
        label = label.replace(completed, required)
    return label
