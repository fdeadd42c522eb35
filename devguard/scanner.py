"""File discovery, loading and per-file analysis."""

import logging
import os
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from devguard.config import DevGuardConfig
from devguard.findings import Finding
from devguard.parse import ParseError, parse_script
from devguard.rules import build_catalog
from devguard.session import analyze

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {'.js', '.mjs', '.cjs', '.jsx'}
SKIP_DIRS = {'node_modules', '.git', 'vendor', 'dist', 'build', '.next', '__pycache__',
             'bower_components', 'jspm_packages', 'coverage'}
SKIP_FILE_PATTERNS = ('.min.js', '-min.js', '.bundle.js', '.chunk.js')


@dataclass
class FileReport:
    """Findings for one file, or the reason it could not be analyzed."""
    path: str
    findings: List[Finding] = field(default_factory=list)
    error: Optional[str] = None
    source: Optional[str] = None


def should_skip_file(file_path: str) -> bool:
    filename = os.path.basename(file_path).lower()
    return any(p in filename for p in SKIP_FILE_PATTERNS)


def read_file(file_path: str) -> Optional[str]:
    for encoding in ['utf-8', 'latin-1', 'cp1252']:
        try:
            with open(file_path, 'r', encoding=encoding) as f:
                return f.read()
        except UnicodeDecodeError:
            continue
        except OSError as exc:
            logger.warning("Cannot read %s: %s", file_path, exc)
            return None
    return None


def filter_suppressed(findings: List[Finding], source: str, keyword: str) -> List[Finding]:
    """Drop findings whose anchor line carries an inline suppression comment."""
    lines = source.split('\n')
    pattern = re.compile(rf'(?://|/\*)\s*{re.escape(keyword)}\b')
    result = []
    for f in findings:
        line = lines[f.line - 1] if 0 < f.line <= len(lines) else ''
        if pattern.search(line):
            continue
        result.append(f)
    return result


def scan_source(source: str, file_path: str = '<string>',
                config: Optional[DevGuardConfig] = None) -> FileReport:
    """Parse and analyze one source text. Parse errors end up in the report."""
    try:
        root = parse_script(source)
    except ParseError as exc:
        logger.warning("Skipping %s: %s", file_path, exc)
        return FileReport(file_path, error=str(exc), source=source)

    findings = analyze(source, root, build_catalog(config))
    keyword = config.suppression_keyword if config else 'devguard-ignore'
    findings = filter_suppressed(findings, source, keyword)
    return FileReport(file_path, findings, source=source)


def scan_file(file_path: str, config: Optional[DevGuardConfig] = None) -> Optional[FileReport]:
    content = read_file(file_path)
    if content is None:
        return None
    return scan_source(content, file_path, config)


def collect_files(target: str, config: Optional[DevGuardConfig] = None) -> List[str]:
    target_path = Path(target)
    files = []
    if target_path.is_file():
        fp = str(target_path)
        if not (config and config.should_exclude(fp)):
            files.append(fp)
    elif target_path.is_dir():
        for root, dirs, filenames in os.walk(str(target_path)):
            dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS)
            for fname in sorted(filenames):
                fp = os.path.join(root, fname)
                ext = Path(fp).suffix.lower()
                if ext in SUPPORTED_EXTENSIONS and not should_skip_file(fp):
                    if config and config.should_exclude(fp):
                        continue
                    files.append(fp)
    else:
        raise FileNotFoundError(target)
    return files


def scan_path(target: str, config: Optional[DevGuardConfig] = None,
              show_progress: bool = False,
              console: Optional[Console] = None) -> Tuple[List[FileReport], float]:
    """Scan a file or directory. Returns (reports, elapsed)."""
    start = time.time()
    files = collect_files(target, config)
    reports: List[FileReport] = []

    if show_progress and files:
        with Progress(
            SpinnerColumn(), TextColumn("[progress.description]{task.description}"),
            BarColumn(), MofNCompleteColumn(), console=console, transient=True
        ) as progress:
            task = progress.add_task("[cyan]Scanning files...", total=len(files))
            for fp in files:
                report = scan_file(fp, config)
                if report is not None:
                    reports.append(report)
                progress.advance(task)
    else:
        for fp in files:
            report = scan_file(fp, config)
            if report is not None:
                reports.append(report)

    logger.debug("Scanned %d file(s)", len(reports))
    return reports, time.time() - start
