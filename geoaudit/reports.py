"""
Report file naming and writing.

JSON and HTML are written directly; the optional PDF is printed from the
HTML report with Playwright.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError, async_playwright

from .models import AuditReport
from .render import render_html

logger = logging.getLogger(__name__)

PDF_VIEWPORT = {"width": 1000, "height": 1300}
PDF_MARGIN = {"top": "10mm", "right": "10mm", "bottom": "12mm", "left": "10mm"}


def host_slug(url: str) -> str:
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    if not host:
        return "unknown-host"
    return re.sub(r"[:/\\]", "-", host)


def timestamp_slug(scanned_at: str) -> str:
    return re.sub(r"[:.]", "-", scanned_at)


def report_basename(report: AuditReport) -> str:
    """<host>-<timestamp>, sortable by scan time for one host."""
    return f"{host_slug(report.url)}-{timestamp_slug(report.scanned_at)}"


def ensure_reports_dir(reports_dir: str) -> Path:
    path = Path(reports_dir).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_json_report(report: AuditReport, reports_dir: Path) -> Path:
    path = reports_dir / f"{report_basename(report)}.json"
    path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    return path


def write_html_report(report: AuditReport, reports_dir: Path) -> Path:
    path = reports_dir / f"{report_basename(report)}.html"
    path.write_text(render_html(report), encoding="utf-8")
    return path


def write_reports(
    report: AuditReport, reports_dir: str, generate_html: bool = True
) -> Dict[str, Optional[Path]]:
    """
    Write the JSON and (optionally) HTML artifacts. Each write is attempted
    independently; a failure is logged and reported as None for that artifact.
    """
    written: Dict[str, Optional[Path]] = {"json": None, "html": None}
    try:
        directory = ensure_reports_dir(reports_dir)
    except OSError as e:
        logger.error(f"Cannot create reports directory {reports_dir}: {e}")
        return written

    try:
        written["json"] = write_json_report(report, directory)
        logger.info(f"Saved JSON report to {written['json']}")
    except OSError as e:
        logger.error(f"JSON report write failed: {e}")

    if generate_html:
        try:
            written["html"] = write_html_report(report, directory)
            logger.info(f"Saved interactive HTML report to {written['html']}")
        except OSError as e:
            logger.error(f"HTML report write failed: {e}")

    return written


# ─── PDF ──────────────────────────────────────────────────────────────


async def render_pdf(html: str, path: Path) -> None:
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            page = await browser.new_page(viewport=PDF_VIEWPORT)
            await page.set_content(html, wait_until="networkidle")
            await page.pdf(path=str(path), format="A4", print_background=True, margin=PDF_MARGIN)
        finally:
            await browser.close()


async def write_pdf_report(report: AuditReport, reports_dir: str) -> Optional[Path]:
    """
    Print the HTML report to <host>-<timestamp>.pdf.

    Returns the path, or None when the PDF was skipped (no browser, or the
    render or write failed). A skipped PDF never affects the other artifacts.
    """
    try:
        directory = ensure_reports_dir(reports_dir)
        path = directory / f"{report_basename(report)}.pdf"
        await render_pdf(render_html(report), path)
    except (PlaywrightError, OSError) as e:
        logger.warning(f"PDF report skipped: {e}")
        return None
    logger.info(f"Saved PDF report to {path}")
    return path
