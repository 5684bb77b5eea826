from __future__ import annotations
from typing import FrozenSet, Iterable, Iterator, Set
from .models import IssueRecord
class FixSelection:
    """Ids of the issues whose fixes the user approved."""
    def __init__(self) -> None:
        self._approved: Set[str] = set()
    def toggle(self, issue_id: str) -> bool:
        if issue_id in self._approved:
            self._approved.discard(issue_id)
            return False
        self._approved.add(issue_id)
        return True
    def approve_all(self, issues: Iterable[IssueRecord]) -> None:
        # Issues that need a secret from the user are never bulk approved,
        # even if they were toggled on by hand before.
        self._approved = {issue.id for issue in issues if not issue.patch.requires_user_input}
    def reset(self) -> None:
        self._approved = set()
    @property
    def ids(self) -> FrozenSet[str]:
        return frozenset(self._approved)
    def __contains__(self, issue_id: object) -> bool:
        return issue_id in self._approved
    def __len__(self) -> int:
        return len(self._approved)
    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._approved))
