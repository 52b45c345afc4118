"""
Main Analyzer
Request pipeline (resolve, fetch, parse, extract, analyze) and CLI entry point
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from colorama import Fore, Style, init as colorama_init

from .config import configure_logging, load_settings
from .downloader import ExtensionDownloader
from .errors import AnalyzerError, InvalidInputError
from .external_tools import build_external_tools
from .identifiers import get_extension_id
from .manifest_analyzer import analyze_manifest
from .report import build_report
from .risk_scoring import (
    analyze_csp,
    analyze_metadata,
    analyze_permissions,
    calculate_js_libraries_score,
)
from .source_scanner import scan_sources
from .unpacker import ExtensionUnpacker, parse_crx
from .utils import extraction_workspace, save_json

logger = logging.getLogger(__name__)


class PipelineStage(Enum):
    """Lifecycle of one analysis request"""
    PENDING = "pending"
    RESOLVED = "resolved"
    FETCHED = "fetched"
    PARSED = "parsed"
    EXTRACTED = "extracted"
    ANALYZED = "analyzed"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass
class AnalysisRun:
    """State of a single request as it moves through the pipeline"""
    stage: PipelineStage = PipelineStage.PENDING
    extension_id: Optional[str] = None
    error: Optional[BaseException] = None
    cleanup_count: int = 0

    def advance(self, stage):
        logger.info("[%s] %s -> %s", self.extension_id or "-", self.stage.value, stage.value)
        self.stage = stage

    def fail(self, error):
        self.error = error
        self.advance(PipelineStage.FAILED)

    def record_cleanup(self):
        self.cleanup_count += 1


def score_manifest(manifest):
    """Run every manifest-only analysis"""
    return {
        'metadata_score': analyze_metadata(manifest),
        'csp': analyze_csp(manifest),
        'permissions': analyze_permissions(manifest),
        'manifest_analysis': analyze_manifest(manifest),
    }


async def gather_or_cancel(*awaitables):
    """
    Await all awaitables concurrently

    On the first failure the remaining tasks are cancelled and awaited
    before the error propagates.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class ExtensionRiskAnalyzer:
    """Pipeline orchestrator; holds no per-request state"""

    def __init__(self, settings=None, downloader=None, vulnerability_scanner=None,
                 linter=None, skip_external=False, show_progress=False):
        self.settings = settings or load_settings()
        self.unpacker = ExtensionUnpacker()
        self.downloader = downloader or ExtensionDownloader(
            max_bytes=self.settings.max_download_bytes,
            timeout=self.settings.download_timeout,
            prodversion=self.settings.prodversion,
            show_progress=show_progress,
        )

        default_scanner, default_linter = build_external_tools(
            self.settings, enabled=False if skip_external else None
        )
        self.vulnerability_scanner = vulnerability_scanner or default_scanner
        self.linter = linter or default_linter

    async def analyze(self, url_or_id, run=None):
        """
        Full pipeline for a store URL or extension ID

        Args:
            url_or_id (str): Chrome Web Store detail URL or bare extension ID
            run (AnalysisRun): Optional state tracker supplied by the caller

        Returns:
            dict: Scored report
        """
        run = run if run is not None else AnalysisRun()

        with extraction_workspace(on_cleanup=run.record_cleanup) as workdir:
            try:
                run.extension_id = get_extension_id(url_or_id)
                run.advance(PipelineStage.RESOLVED)

                crx_bytes = await asyncio.to_thread(
                    self.downloader.download_extension, run.extension_id
                )
                run.advance(PipelineStage.FETCHED)

                return await self._analyze_package(crx_bytes, workdir, run)
            except (Exception, asyncio.CancelledError) as e:
                run.fail(e)
                raise

    async def analyze_package(self, crx_bytes, run=None):
        """Pipeline for an already-fetched CRX package"""
        run = run if run is not None else AnalysisRun()

        with extraction_workspace(on_cleanup=run.record_cleanup) as workdir:
            try:
                run.advance(PipelineStage.FETCHED)
                return await self._analyze_package(crx_bytes, workdir, run)
            except (Exception, asyncio.CancelledError) as e:
                run.fail(e)
                raise

    async def _analyze_package(self, crx_bytes, workdir, run):
        archive = parse_crx(crx_bytes)
        run.advance(PipelineStage.PARSED)

        await asyncio.to_thread(self.unpacker.extract_archive, archive, workdir)
        manifest = self.unpacker.read_manifest(workdir)
        file_contents = await asyncio.to_thread(self.unpacker.get_file_list, workdir)
        run.advance(PipelineStage.EXTRACTED)

        manifest_scores, source_usage, retire_data, lint_summary = await gather_or_cancel(
            asyncio.to_thread(score_manifest, manifest),
            asyncio.to_thread(scan_sources, file_contents),
            self.vulnerability_scanner.scan(workdir),
            self.linter.lint(workdir),
        )

        report = build_report(
            manifest,
            manifest_scores['metadata_score'],
            manifest_scores['csp'],
            manifest_scores['permissions'],
            calculate_js_libraries_score(retire_data),
            manifest_scores['manifest_analysis'],
            source_usage,
            lint_summary,
        )
        run.advance(PipelineStage.ANALYZED)
        return report


def _score_colour(score):
    if score >= 30:
        return Fore.RED
    if score >= 10:
        return Fore.YELLOW
    return Fore.GREEN


def print_summary(report):
    """Print a short human-readable summary of a report"""
    breakdown = report['breakdown']
    colour = _score_colour(report['totalRiskScore'])

    print("=" * 80)
    print(f"Extension: {report['name']}")
    print(f"Version:   {report['version']}")
    print(f"Total risk score: {colour}{report['totalRiskScore']}{Style.RESET_ALL}")
    print("-" * 80)
    print(f"  Metadata:      {breakdown['metadataScore']}")
    print(f"  CSP:           {breakdown['cspScore']}")
    print(f"  Permissions:   {breakdown['permissionsScore']}")
    print(f"  JS libraries:  {breakdown['jsLibrariesScore']}")
    print(f"  Files using chrome.* APIs: {breakdown['chromeAPIUsage']}")
    print(f"  Lint issues:   {breakdown['eslintIssues']}")

    permissions = report['details']['permissionsDetails']
    if permissions:
        print("-" * 80)
        for message in permissions.values():
            print(f"  [!] {message}")
    print("=" * 80)


def parse_cli_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Chrome extension security/privacy risk scorer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  extension-risk cjpalhdlnbpafiamejdnhcphjbkeiagm
  extension-risk https://chromewebstore.google.com/detail/ublock-origin/cjpalhdlnbpafiamejdnhcphjbkeiagm
  extension-risk --crx downloads/extension.crx --fast
        """
    )
    parser.add_argument('target', nargs='?', help='Chrome Web Store URL or extension ID')
    parser.add_argument('--crx', type=Path, help='Analyze a local .crx file instead of downloading')
    parser.add_argument('--config', type=Path, help='Path to config.json')
    parser.add_argument('--output', type=Path, help='Write the JSON report to this file')
    parser.add_argument('--fast', action='store_true', help='Skip retire.js and ESLint')
    parser.add_argument('--log-level', help='Override the configured log level')

    args = parser.parse_args(argv)
    if not args.target and not args.crx:
        parser.error("a target URL/ID or --crx is required")
    return args


def main(argv=None):
    """CLI entry point"""
    colorama_init()
    args = parse_cli_args(argv)

    try:
        settings = load_settings(args.config)
    except AnalyzerError as e:
        print(f"{Fore.RED}[X] {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1
    configure_logging(args.log_level or settings.log_level)

    analyzer = ExtensionRiskAnalyzer(settings, skip_external=args.fast, show_progress=True)

    try:
        if args.crx:
            report = asyncio.run(analyzer.analyze_package(args.crx.read_bytes()))
        else:
            report = asyncio.run(analyzer.analyze(args.target))
    except InvalidInputError as e:
        print(f"{Fore.RED}[X] {e}{Style.RESET_ALL}", file=sys.stderr)
        return 2
    except (AnalyzerError, OSError) as e:
        logger.exception("Analysis failed")
        print(f"{Fore.RED}[X] Analysis failed: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1

    print_summary(report)
    if args.output:
        save_json(report, args.output)
        print(f"[+] Report saved to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
