"""Command line entry point."""

import argparse
import logging
from typing import List, Optional

from rich.console import Console

from devguard.config import ConfigError, DevGuardConfig, load_config
from devguard.log import configure_logging
from devguard.report import output_json, output_rich, output_text_plain, print_banner
from devguard.rules import RULE_IDS
from devguard.scanner import scan_path

logger = logging.getLogger('devguard.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='devguard',
        description='DevGuard - JavaScript code anomaly detector'
    )
    parser.add_argument('target', help='File or directory to scan')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    parser.add_argument('--output', choices=['text', 'json'], default='text', help='Output format')
    parser.add_argument('-o', '--output-file', help='Save report to file')
    parser.add_argument('--config', help='Path to .devguard.yml config file')
    parser.add_argument('--disable', action='append', default=[], choices=RULE_IDS,
                        metavar='RULE', help='Disable a rule (repeatable): ' + ', '.join(RULE_IDS))
    parser.add_argument('--no-banner', action='store_true', help='Suppress banner')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    console = Console()
    configure_logging(args.verbose)

    try:
        config = load_config(args.target, args.config)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    if args.disable:
        config = config or DevGuardConfig()
        config.disabled_rules = list(config.disabled_rules) + args.disable

    is_json = args.output == 'json'
    if not args.no_banner and not is_json:
        print_banner(console)

    try:
        reports, elapsed = scan_path(args.target, config, show_progress=not is_json, console=console)
    except FileNotFoundError:
        logger.error("%s does not exist", args.target)
        return 2

    if is_json:
        output_json(reports, args.output_file)
    else:
        output_rich(reports, args.target, elapsed, console)
        if args.output_file:
            output_text_plain(reports, args.output_file)
            console.print(f"\n[bold green]Report saved to {args.output_file}[/bold green]")

    return 1 if any(r.findings for r in reports) else 0
