"""
Command-line entry point.

Usage:
    geoaudit https://example.com
    geoaudit https://example.com --max-pages 10 --max-depth 2 --no-html
    geoaudit https://example.com --pdf

Exit codes:
    0   success
    1   no target URL, bad arguments or invalid configuration
    2   the fetch failed
    3   the fetch returned no extractable HTML
    99  anything else
"""

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .analyzer import GeoAuditor, build_enrichment_context, concatenate_pages
from .assembler import attach_enrichment
from .config import AuditConfig
from .enrichment import enrich
from .errors import EXIT_FATAL, EXIT_OK, EXIT_USAGE, GeoAuditError, UsageError
from .fetch import fetch_pages
from .models import AuditReport
from .render import summary_lines
from .reports import write_pdf_report, write_reports

logger = logging.getLogger("geoaudit")


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="geoaudit",
        description="Audit a web page for SEO and local GEO readiness.",
    )
    parser.add_argument("url", nargs="?", help="Target page URL")
    parser.add_argument("--max-pages", type=int, help="Crawl up to N pages (default: 1)")
    parser.add_argument("--max-depth", type=int, help="BFS depth in multi-page mode (default: 2)")
    parser.add_argument("--reports-dir", help="Output directory (default: reports)")
    parser.add_argument("--no-html", action="store_true", help="Skip the HTML report")
    parser.add_argument("--pdf", action="store_true", help="Also write a PDF report (needs a Playwright browser)")
    parser.add_argument("--no-enrichment", action="store_true", help="Skip AI enrichment")
    return parser


def load_config(args: argparse.Namespace) -> AuditConfig:
    """Environment first, then CLI flags on top."""
    if not args.url:
        raise UsageError("Usage: geoaudit <url>")
    try:
        config = AuditConfig.from_env(args.url)
        overrides: Dict[str, Any] = {}
        if args.max_pages is not None:
            overrides["max_pages"] = args.max_pages
        if args.max_depth is not None:
            overrides["max_depth"] = args.max_depth
        if args.reports_dir:
            overrides["reports_dir"] = args.reports_dir
        if args.no_html:
            overrides["generate_html"] = False
        if args.pdf:
            overrides["generate_pdf"] = True
        if args.no_enrichment:
            overrides["enrichment_enabled"] = False
        if overrides:
            config = AuditConfig.model_validate({**config.model_dump(), **overrides})
    except (ValidationError, ValueError) as e:
        raise UsageError(f"Invalid configuration: {e}") from e
    return config


async def run(config: AuditConfig, auditor: Optional[GeoAuditor] = None) -> AuditReport:
    """
    Fetch, audit, enrich and write reports for one target.

    Raises:
        FetchError / NoContentError from the fetch step. Enrichment and
        report-writing failures are logged and never abort the run.
    """
    auditor = auditor or GeoAuditor()

    pages = await fetch_pages(config)
    logger.info(f"Auditing {len(pages)} page(s) for {config.target_url}")
    report = auditor.analyze_pages(pages)

    if config.enrichment_enabled:
        context = build_enrichment_context(report.rubric, report.metrics)
        enrichment = await enrich(config, context, concatenate_pages(pages))
        report = attach_enrichment(report, enrichment)
        logger.info(f"Enrichment status: {enrichment.status.value}")

    write_reports(report, config.reports_dir, generate_html=config.generate_html)
    if config.generate_pdf:
        await write_pdf_report(report, config.reports_dir)
    for line in summary_lines(report):
        logger.info(line)
    return report


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        config.log_startup_warnings()
        asyncio.run(run(config))
    except GeoAuditError as e:
        logger.error(str(e))
        return e.exit_code
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return EXIT_FATAL
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
