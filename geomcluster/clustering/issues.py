"""
Advisory issues attached to clustering results.

Nothing the engine hits while classifying individual entities is raised
to the caller. Each problem becomes a `ClusteringIssue` on the result and
is logged at the matching level.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)

# Issue codes
TOLERANCE_SUBSTITUTED = "TOLERANCE_SUBSTITUTED"
SKIPPED_INVALID = "SKIPPED_INVALID"
UNCLASSIFIABLE_ENTITY = "UNCLASSIFIABLE_ENTITY"
GEOMETRY_FAILURE = "GEOMETRY_FAILURE"
UNKNOWN_METHOD = "UNKNOWN_METHOD"


class IssueSeverity(Enum):
    """Severity level of a clustering issue."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    IssueSeverity.INFO: logging.INFO,
    IssueSeverity.WARNING: logging.WARNING,
    IssueSeverity.ERROR: logging.ERROR,
}


@dataclass
class ClusteringIssue:
    """A single issue found while processing one invocation."""
    code: str
    severity: IssueSeverity
    message: str
    count: int = 1
    details: List[int] = field(default_factory=list)  # input indices

    def __str__(self) -> str:
        if self.count > 1:
            return f"[{self.severity.value.upper()}] {self.code}: {self.message} ({self.count} occurrences)"
        return f"[{self.severity.value.upper()}] {self.code}: {self.message}"

    def to_dict(self) -> dict:
        return {
            'code': self.code,
            'severity': self.severity.value,
            'message': self.message,
            'count': self.count,
            'details': list(self.details),
        }


class IssueLog:
    """Ordered issue collector for one invocation.

    Repeated issues with the same code and message are folded into one
    entry with an increasing count.
    """

    def __init__(self, source: Optional[logging.Logger] = None) -> None:
        self.issues: List[ClusteringIssue] = []
        self._logger = source or logger

    def add(
        self,
        code: str,
        severity: IssueSeverity,
        message: str,
        index: Optional[int] = None,
    ) -> ClusteringIssue:
        self._logger.log(_LOG_LEVELS[severity], "%s: %s", code, message,
                         extra={"issue_code": code})
        for issue in self.issues:
            if issue.code == code and issue.message == message:
                issue.count += 1
                if index is not None:
                    issue.details.append(index)
                return issue

        issue = ClusteringIssue(code=code, severity=severity, message=message,
                                details=[index] if index is not None else [])
        self.issues.append(issue)
        return issue

    def info(self, code: str, message: str, index: Optional[int] = None) -> ClusteringIssue:
        return self.add(code, IssueSeverity.INFO, message, index)

    def warning(self, code: str, message: str, index: Optional[int] = None) -> ClusteringIssue:
        return self.add(code, IssueSeverity.WARNING, message, index)

    def error(self, code: str, message: str, index: Optional[int] = None) -> ClusteringIssue:
        return self.add(code, IssueSeverity.ERROR, message, index)

    def extend(self, issues: List[ClusteringIssue]) -> None:
        """Append issues produced by a nested call, without re-logging them."""
        self.issues.extend(issues)

    def __iter__(self):
        return iter(self.issues)

    def __len__(self) -> int:
        return len(self.issues)


def warnings_of(issues: List[ClusteringIssue]) -> List[ClusteringIssue]:
    """Warning-level issues."""
    return [i for i in issues if i.severity == IssueSeverity.WARNING]


def errors_of(issues: List[ClusteringIssue]) -> List[ClusteringIssue]:
    """Error-level issues."""
    return [i for i in issues if i.severity == IssueSeverity.ERROR]
