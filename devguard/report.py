"""Report rendering: rich terminal output, plain text and JSON."""

import json
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from rich import box
from rich.align import Align
from rich.console import Console, Group
from rich.panel import Panel
from rich.rule import Rule
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from devguard import __version__
from devguard.findings import Finding
from devguard.scanner import FileReport

RULE_STYLES = {
    'missing-initializer': 'yellow',
    'unsafe-member-access': 'bold red',
    'nested-callback': 'magenta',
    'debug-statement': 'cyan',
    'legacy-declaration': 'yellow',
    'excess-parameters': 'blue',
    'oversized-function': 'blue',
    'magic-number': 'green',
}


def rule_counts(reports: List[FileReport]) -> Dict[str, int]:
    counts = Counter(f.rule_id for r in reports for f in r.findings)
    return dict(sorted(counts.items()))


# ============================================================================
# Rich UI Output
# ============================================================================

def print_banner(console: Console):
    title = Text()
    title.append("DevGuard", style="bold yellow")
    title.append(f" v{__version__}\n", style="bold white")
    title.append("JavaScript code anomaly detector", style="dim")
    console.print(Panel(Align.center(title), border_style="yellow", box=box.DOUBLE, padding=(0, 2)))
    console.print()


def _build_stats_panel(reports: List[FileReport], elapsed: float) -> Panel:
    stats = Table(show_header=False, box=None, padding=(0, 1), expand=True)
    stats.add_column("key", style="bold cyan", no_wrap=True, ratio=3)
    stats.add_column("value", style="white", ratio=1)
    stats.add_row("Files Scanned", str(len(reports)))
    stats.add_row("Parse Errors", str(sum(1 for r in reports if r.error)))
    stats.add_row("Total Findings", str(sum(len(r.findings) for r in reports)))
    stats.add_row("Scan Time", f"{elapsed:.2f}s")

    counts = rule_counts(reports)
    if counts:
        stats.add_row("", "")
    for rule_id, count in sorted(counts.items(), key=lambda x: -x[1]):
        stats.add_row(Text(rule_id, style=RULE_STYLES.get(rule_id, "white")), str(count))

    return Panel(stats, title="[bold white]Scan Statistics[/bold white]",
                 border_style="cyan", box=box.ROUNDED, padding=(1, 1))


def _build_finding_panel(f: Finding, source: Optional[str] = None) -> Panel:
    style = RULE_STYLES.get(f.rule_id, "white")
    title = Text()
    title.append(f" {f.rule_id} ", style=style)
    title.append(f" Line {f.line} ", style="dim")

    parts = [Text(f.message, style="white")]
    if source:
        src_lines = source.split('\n')
        start = max(0, f.line - 2)
        end = min(len(src_lines), f.line + 1)
        snippet = '\n'.join(src_lines[start:end])
        parts.append(Text(""))
        parts.append(Syntax(snippet, "javascript", theme="monokai", line_numbers=True,
                            start_line=start + 1, highlight_lines={f.line}))

    return Panel(Group(*parts), title=title, title_align="left",
                 border_style=style, box=box.ROUNDED, padding=(0, 1))


def output_rich(reports: List[FileReport], target: str, elapsed: float, console: Console):
    header = Text()
    header.append("Target: ", style="bold cyan")
    header.append(f"{target}  ", style="white")
    header.append("Date: ", style="bold cyan")
    header.append(datetime.now().strftime('%Y-%m-%d %H:%M:%S'), style="white")
    console.print(Panel(Align.center(header), title="[bold white]Scan Info[/bold white]",
                        border_style="blue", box=box.ROUNDED))
    console.print(_build_stats_panel(reports, elapsed))
    console.print()

    for report in reports:
        if report.error:
            console.print(Text(f"PARSE ERROR: {report.path}: {report.error}", style="bold red"))

    if not any(r.findings for r in reports):
        console.print(Panel(Align.center(Text("No anomalies found.", style="bold green")),
                            border_style="green", box=box.ROUNDED, padding=(1, 4)))
        return

    console.print(Rule("[bold white]Anomalies[/bold white]", style="yellow"))
    for report in reports:
        if not report.findings:
            continue
        console.print(Text(f"FILE: {report.path}", style="bold underline cyan"))
        for f in report.findings:
            console.print(_build_finding_panel(f, report.source))
        console.print()


def output_text_plain(reports: List[FileReport], file_path: str):
    total = 0
    with open(file_path, 'w', encoding='utf-8') as out:
        for report in reports:
            if report.error:
                out.write(f"{report.path}: parse error: {report.error}\n")
            for f in report.findings:
                out.write(f"{report.path}:{f.line}:{f.column}: [{f.rule_id}] {f.message}\n")
                total += 1
        out.write(f"\nTotal findings: {total}\n")


def output_json(reports: List[FileReport], file_path: str = None):
    data = {
        "scan_date": datetime.now().isoformat(),
        "scanner": f"devguard v{__version__}",
        "total_findings": sum(len(r.findings) for r in reports),
        "files": [
            {
                "file": r.path,
                "error": r.error,
                "findings": [
                    {"rule": f.rule_id, "message": f.message, "line": f.line, "column": f.column}
                    for f in r.findings
                ],
            }
            for r in reports
        ],
        "summary": {"by_rule": rule_counts(reports)},
    }
    json_str = json.dumps(data, indent=2)
    if file_path:
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(json_str)
    else:
        print(json_str)
