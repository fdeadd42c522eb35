"""Finding value object and the append-only collector."""

from dataclasses import dataclass
from typing import Iterator, List


@dataclass(frozen=True)
class Finding:
    """A single reported anomaly anchored at a source line."""
    rule_id: str
    message: str
    line: int
    column: int = 1


class FindingCollector:
    """Accumulates findings in insertion order. No deduplication."""

    def __init__(self):
        self._findings: List[Finding] = []

    def record(self, finding: Finding) -> None:
        self._findings.append(finding)

    def results(self) -> List[Finding]:
        return list(self._findings)

    def __len__(self) -> int:
        return len(self._findings)

    def __iter__(self) -> Iterator[Finding]:
        return iter(list(self._findings))
