"""DevGuard - JavaScript code anomaly detector."""

__version__ = "1.0.0"

from devguard.findings import Finding, FindingCollector
from devguard.parse import ParseError, parse_script
from devguard.rules import DEFAULT_CATALOG, Rule, Visit, build_catalog
from devguard.session import AnalysisSession, SourceUnit, analyze
from devguard.traverse import traverse, walk

__all__ = [
    'AnalysisSession', 'DEFAULT_CATALOG', 'Finding', 'FindingCollector',
    'ParseError', 'Rule', 'SourceUnit', 'Visit', 'analyze', 'build_catalog',
    'parse_script', 'traverse', 'walk',
]
