import pytest

from devguard.config import DevGuardConfig
from devguard.findings import Finding, FindingCollector
from devguard.parse import parse_script
from devguard.rules import DEFAULT_CATALOG, RULE_IDS, build_catalog, without
from devguard.session import AnalysisSession, SourceUnit, analyze

SAMPLE = (
    "var total;\n"
    "let cache = null;\n"
    "function process(a, b, c, d) {\n"
    "  console.log(cache.size);\n"
    "  return a * 60;\n"
    "}\n"
    "(function (done) { done(); })(function () {});\n"
    "function long() {\n"
    + "  // filler\n" * 55 +
    "}\n"
)


@pytest.fixture
def sample_root():
    return parse_script(SAMPLE)


def test_sample_triggers_every_rule(sample_root):
    findings = analyze(SAMPLE, sample_root)
    assert {f.rule_id for f in findings} == set(RULE_IDS)


def test_analysis_is_repeatable(sample_root):
    first = analyze(SAMPLE, sample_root)
    second = analyze(SAMPLE, sample_root)
    assert first == second

    session = AnalysisSession(SourceUnit(SAMPLE, sample_root))
    assert session.run() == session.run() == first


@pytest.mark.parametrize("rule_id", RULE_IDS)
def test_disabling_a_rule_only_removes_its_findings(sample_root, rule_id):
    full = analyze(SAMPLE, sample_root)
    reduced = analyze(SAMPLE, sample_root, without(DEFAULT_CATALOG, rule_id))
    assert reduced == [f for f in full if f.rule_id != rule_id]


def test_finding_lines_within_source(sample_root):
    unit = SourceUnit(SAMPLE, sample_root)
    findings = AnalysisSession(unit).run()
    assert findings
    assert all(1 <= f.line <= unit.line_count for f in findings)


def test_findings_follow_visit_order(sample_root):
    lines = [f.line for f in analyze(SAMPLE, sample_root)]
    assert lines == sorted(lines)


def test_empty_catalog_reports_nothing(sample_root):
    assert analyze(SAMPLE, sample_root, ()) == []


def test_source_unit_line_count():
    assert SourceUnit("a;\nb;\n", parse_script("a;\nb;\n")).line_count == 2
    assert SourceUnit("", parse_script("")).line_count == 1


def test_collector_keeps_duplicates_in_order():
    collector = FindingCollector()
    first = Finding('magic-number', 'Magic number detected: 1.', 1)
    second = Finding('legacy-declaration', 'var', 2)
    collector.record(first)
    collector.record(second)
    collector.record(first)
    assert collector.results() == [first, second, first]
    assert len(collector) == 3
    assert list(collector) == [first, second, first]

    snapshot = collector.results()
    snapshot.clear()
    assert len(collector) == 3


def test_build_catalog_applies_config():
    config = DevGuardConfig(disabled_rules=['magic-number'], max_params=5)
    catalog = build_catalog(config)
    assert [r.rule_id for r in catalog] == [r for r in RULE_IDS if r != 'magic-number']

    source = "function f(a, b, c, d) { return 1; }"
    assert analyze(source, parse_script(source), catalog) == []


def test_build_catalog_default():
    assert build_catalog(None) is DEFAULT_CATALOG
