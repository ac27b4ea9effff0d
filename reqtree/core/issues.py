"""
Resolution issues - Non-fatal anomalies recorded while building trees.

Neither engine raises for malformed source material. Each anomaly is
recorded as a ResolutionIssue, logged, and returned alongside the tree
so callers can monitor how much information was dropped.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List
from enum import Enum

from ..utils.logger import get_logger

logger = get_logger(__name__)


class IssueKind(Enum):
    """Categories of anomalies the engines tolerate."""
    PARSE_AMBIGUITY = "parse_ambiguity"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    MALFORMED_BLOCK_IDENTIFIER = "malformed_block_identifier"
    STRUCTURAL_INVARIANT_VIOLATION = "structural_invariant_violation"


class IssueSeverity(Enum):
    """Severity levels for issues."""
    ERROR = "error"       # Must be fixed before persisting
    WARNING = "warning"   # Information was lost
    INFO = "info"         # Informational


@dataclass
class ResolutionIssue:
    """A single recorded anomaly."""
    kind: IssueKind
    message: str
    severity: IssueSeverity = IssueSeverity.WARNING
    path: str = ""  # Location inside the input, e.g. "ruleArray[2].ruleArray[0]"
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "severity": self.severity.value,
            "path": self.path,
            "context": self.context,
        }


class IssueLog:
    """
    Append-only collector handed down through one parse or resolution.

    A fresh log is created per call, so nothing carries over between runs.
    """

    def __init__(self):
        self._issues: List[ResolutionIssue] = []

    def record(
        self,
        kind: IssueKind,
        message: str,
        path: str = "",
        severity: IssueSeverity = IssueSeverity.WARNING,
        **context,
    ) -> ResolutionIssue:
        issue = ResolutionIssue(
            kind=kind,
            message=message,
            severity=severity,
            path=path,
            context=context,
        )
        self._issues.append(issue)
        logger.debug(f"{kind.value}: {message}" + (f" at {path}" if path else ""))
        return issue

    @property
    def issues(self) -> List[ResolutionIssue]:
        return list(self._issues)

    def of_kind(self, kind: IssueKind) -> List[ResolutionIssue]:
        return [i for i in self._issues if i.kind == kind]

    def __len__(self) -> int:
        return len(self._issues)


def summarize_issues(issues: List[ResolutionIssue]) -> Dict[str, int]:
    """Count issues per kind, omitting kinds that never occurred."""
    counts: Dict[str, int] = {}
    for issue in issues:
        counts[issue.kind.value] = counts.get(issue.kind.value, 0) + 1
    return counts
