"""Analysis session: one traversal over one source unit."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from devguard.findings import Finding, FindingCollector
from devguard.nodes import Function, Node
from devguard.rules import DEFAULT_CATALOG, Rule, RuleCatalog, Visit
from devguard.traverse import traverse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceUnit:
    text: str
    root: Node

    @property
    def line_count(self) -> int:
        lines = self.text.split('\n')
        if len(lines) > 1 and lines[-1] == '':
            lines.pop()
        return len(lines)


class AnalysisSession:
    """Applies every rule of a catalog, in catalog order, at each visited node."""

    def __init__(self, unit: SourceUnit, catalog: RuleCatalog = DEFAULT_CATALOG):
        self.unit = unit
        self.catalog = tuple(catalog)

    def run(self) -> List[Finding]:
        collector = FindingCollector()

        def visit(node: Node, parent: Optional[Node], function: Optional[Function]) -> None:
            plain = Visit(node, parent, function)
            textual = plain._replace(source=self.unit.text)
            for rule in self.catalog:
                for finding in self._apply(rule, textual if rule.uses_source else plain):
                    collector.record(finding)

        traverse(self.unit.root, visit)
        logger.debug("%d finding(s) from %d rule(s)", len(collector), len(self.catalog))
        return collector.results()

    @staticmethod
    def _apply(rule: Rule, visit: Visit) -> List[Finding]:
        # A rule that cannot evaluate a node does not match it
        try:
            return rule.apply(visit)
        except Exception as exc:
            logger.debug("Rule %s skipped %s at line %d: %s", rule.rule_id,
                         visit.node.kind, visit.node.loc.start.line, exc)
            return []


def analyze(source_text: str, root: Node, catalog: RuleCatalog = DEFAULT_CATALOG) -> List[Finding]:
    """Run one analysis session and return its ordered findings."""
    return AnalysisSession(SourceUnit(source_text, root), catalog).run()
