"""
reqtree - Build canonical requirement trees from academic source material.

Main modules:
- parser: Parse catalogue prerequisite text into prerequisite trees
- audit: Resolve degree audit rule arrays into requirement trees
- validator: Check trees before they are persisted
- cli: Command-line interface
"""

from .cli import run_prereq_pipeline, run_audit_pipeline

__version__ = "1.0.0"

__all__ = [
    'run_prereq_pipeline',
    'run_audit_pipeline',
    '__version__',
]
