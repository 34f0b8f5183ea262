"""Data models for the filter matching engine."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class MatchResult:
    """Outcome of evaluating one Posting against a Filter.

    Attributes:
        is_match: True if every check passed (or the filter is inactive)
        failed_checks: Names of the checks that rejected the posting, in
            evaluation order (keywords, salary, city, remote, experience, agency)
        filter_active: False when the filter was absent or inactive and the
            posting passed without evaluation
    """

    is_match: bool
    failed_checks: List[str] = field(default_factory=list)
    filter_active: bool = True

    @property
    def reason(self) -> str:
        if self.is_match:
            return "matched" if self.filter_active else "filter inactive"
        return ", ".join(self.failed_checks)
