#!/usr/bin/env python3
"""
Heuristic Auditor - usability heuristic evaluation of a web page.

Captures a page (or reads a pre-captured one), runs the five-stage
heuristic evaluation pipeline and prints the score, violations and
strengths.

Usage:
    heuristic-auditor --url https://example.com
    heuristic-auditor --url https://example.com --heuristics visibility,5,help --json result.json
    heuristic-auditor --url https://example.com --html page.html --screenshot page.png
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from rich.table import Table

from .analyzer.heuristics import parse_selection
from .analyzer.pipeline import HeuristicPipeline, PipelineResult
from .capture.page import CapturedPage
from .capture.renderer import PageCapture
from .exceptions import AuditorError, InvalidInputError
from .utils.config import Settings
from .utils.log import (
    console,
    setup_logger,
    print_status,
    print_success,
    print_error,
    print_warning,
    print_info
)
from .utils.paths import ensure_parent_dir, validate_url


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='heuristic-auditor',
        description="Evaluate a web page against Nielsen's ten usability heuristics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --url https://example.com
    %(prog)s --url https://example.com --heuristics visibility,error_prevention
    %(prog)s --url https://example.com --html page.html --screenshot page.png --json out.json
        """
    )

    parser.add_argument(
        '--url', '-u',
        type=str,
        required=True,
        help='URL of the page to evaluate (e.g., https://example.com)'
    )

    parser.add_argument(
        '--heuristics',
        type=str,
        default='all',
        help='Comma-separated heuristic ids, numbers or labels (default: all)'
    )

    parser.add_argument(
        '--html',
        type=str,
        help='Pre-captured HTML file (skips live capture; requires --screenshot)'
    )

    parser.add_argument(
        '--screenshot',
        type=str,
        help='Pre-captured screenshot image file (PNG, JPEG, GIF or WEBP)'
    )

    parser.add_argument(
        '--markdown',
        type=str,
        help='Pre-captured markdown file (derived from the HTML when omitted)'
    )

    parser.add_argument(
        '--json', '-o',
        type=str,
        dest='json_output',
        help='Write the full result as JSON to this file'
    )

    parser.add_argument(
        '--env-file',
        type=str,
        help='Load configuration from this .env file'
    )

    parser.add_argument(
        '--timeout',
        type=int,
        help='Page load timeout in milliseconds (default: AUDITOR_CAPTURE_TIMEOUT)'
    )

    parser.add_argument(
        '--reject-technical',
        action='store_true',
        help='Drop findings about markup, SEO or performance during validation'
    )

    parser.add_argument(
        '--no-headless',
        action='store_true',
        help='Run browser in visible mode (useful for debugging)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    return parser.parse_args(argv)


def print_banner() -> None:
    """Print the application banner."""
    banner = """
╔═══════════════════════════════════════════════════════════════╗
║                   HEURISTIC AUDITOR v1.0                      ║
║          Nielsen Heuristic Evaluation of Web Pages            ║
╚═══════════════════════════════════════════════════════════════╝
    """
    print_status(banner, "bold cyan")


def print_summary(result: PipelineResult) -> None:
    """
    Print the evaluation summary.

    Args:
        result: PipelineResult
    """
    data = result.to_dict()
    meta = data["metadata"]
    comparison = data["industryComparison"]

    print("\n" + "=" * 60)
    print_success("EVALUATION SUMMARY")
    print("=" * 60)
    print(f"  Overall score:       {data['overallScore']}/95")
    print(f"  Industry band:       {comparison['category']} (percentile {comparison['percentile']})")
    print(f"  Heuristics:          {meta['heuristicsEvaluated']}/{meta['heuristicsRequested']} evaluated")
    print(f"  Violations:          {meta['violationsAfterValidation']} "
          f"(from {meta['violationsBeforeValidation']} candidates)")
    print(f"  Strengths:           {len(data['strengths'])}")
    if data["breakdown"].get("capReason"):
        print(f"  Score capped:        {data['breakdown']['capReason']}")

    table = Table(title="Category scores")
    table.add_column("Heuristic")
    table.add_column("Score", justify="right")
    for name, score in data["categoryScores"].items():
        table.add_row(name, "-" if score is None else f"{score:.1f}")
    console.print(table)

    if result.violations:
        violations = Table(title="Violations")
        violations.add_column("Severity")
        violations.add_column("Heuristic")
        violations.add_column("Title")
        violations.add_column("Element")
        for violation in result.violations:
            violations.add_row(
                violation.severity.value,
                violation.heuristic.display_name,
                violation.title,
                violation.page_element,
            )
        console.print(violations)

    for warning in meta["warnings"]:
        print_warning(warning)

    print("=" * 60 + "\n")


def load_captured_page(args: argparse.Namespace) -> CapturedPage:
    """
    Build a page from pre-captured files.

    Raises:
        InvalidInputError: If a file is missing or unreadable
        InvalidScreenshotError: If the screenshot is unusable
    """
    if not args.screenshot:
        raise InvalidInputError("--html requires --screenshot")
    try:
        with open(args.html, 'r', encoding='utf-8') as f:
            html = f.read()
        with open(args.screenshot, 'rb') as f:
            screenshot = f.read()
        markdown = None
        if args.markdown:
            with open(args.markdown, 'r', encoding='utf-8') as f:
                markdown = f.read()
    except OSError as e:
        raise InvalidInputError(f"Cannot read captured page: {e}")
    return CapturedPage.from_payload(args.url, html, markdown, screenshot)


async def capture_page(args: argparse.Namespace, settings: Settings) -> CapturedPage:
    """Capture the page live with Playwright."""
    async with PageCapture(
        timeout=args.timeout or settings.capture_timeout,
        headless=not args.no_headless
    ) as capture:
        return await capture.capture(args.url)


def write_json(result: PipelineResult, path: str) -> None:
    ensure_parent_dir(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the heuristic auditor.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level)

    if not args.quiet:
        print_banner()

    try:
        # Fatal input errors surface before any capture or model call
        url = validate_url(args.url)
        heuristics = parse_selection(args.heuristics)
        settings = Settings.from_env(args.env_file)
        if args.reject_technical:
            settings = dataclasses.replace(settings, reject_technical=True)

        if not args.quiet:
            print_info(f"Target URL: {url}")
            print_info(f"Heuristics: {', '.join(h.id for h in heuristics)}")

        if args.html:
            page = load_captured_page(args)
        else:
            page = await capture_page(args, settings)

        pipeline = HeuristicPipeline.from_settings(settings)
        result = await pipeline.run(page, heuristics)

        if not args.quiet:
            print_summary(result)

        if args.json_output:
            write_json(result, args.json_output)
            print_success(f"Result written to: {args.json_output}")

        return 0

    except KeyboardInterrupt:
        print_error("\nEvaluation interrupted by user")
        return 1
    except AuditorError as e:
        print_error(f"{e.error_type}: {e}")
        return 1
    except OSError as e:
        print_error(f"Cannot write result: {e}")
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
