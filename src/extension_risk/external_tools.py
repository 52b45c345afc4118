"""
External scanners
Ports for the JS library vulnerability scanner and the static linter, plus
subprocess adapters for retire.js and ESLint
"""

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import ExternalToolError

logger = logging.getLogger(__name__)

# retire exits 13 when it found vulnerable libraries
RETIRE_OK_EXIT_CODES = (0, 13)
# eslint exits 1 when it reported lint errors, 2 on crash
ESLINT_OK_EXIT_CODES = (0, 1)

# flat config with eslint-plugin-security, shipped as package data
ESLINT_CONFIG_PATH = Path(__file__).resolve().parent / "eslint.config.mjs"


class VulnerabilityScanner(ABC):
    """Finds known-vulnerable JS libraries below a directory"""

    @abstractmethod
    async def scan(self, directory: Path) -> list:
        """Return the ``data`` entries of a retire.js style JSON report"""


class StaticLinter(ABC):
    """Runs a static lint ruleset over the scripts below a directory"""

    @abstractmethod
    async def lint(self, directory: Path) -> dict:
        """Return a lint summary as built by summarize_lint_results"""


def summarize_lint_results(results: list) -> dict:
    """
    Fold ESLint JSON output into issue counts and a rule-id histogram

    Args:
        results: ESLint ``--format json`` output, one entry per file
    """
    summary = {
        'totalIssues': 0,
        'errors': 0,
        'warnings': 0,
        'commonIssues': {},
    }

    for result in results:
        if not isinstance(result, dict):
            continue
        for message in result.get('messages') or []:
            summary['totalIssues'] += 1
            if message.get('severity') == 2:
                summary['errors'] += 1
            else:
                summary['warnings'] += 1

            rule_id = message.get('ruleId')
            rule_id = 'null' if rule_id is None else str(rule_id)
            summary['commonIssues'][rule_id] = summary['commonIssues'].get(rule_id, 0) + 1

    return summary


async def run_tool(name: str, command: Sequence[str], timeout: float,
                   ok_exit_codes: Sequence[int], allow_stderr: bool = False,
                   cwd: Optional[Path] = None, env: Optional[dict] = None):
    """
    Run an external tool and return its decoded stdout

    The process is killed if it outlives ``timeout`` or the awaiting task
    is cancelled.

    Raises:
        ExternalToolError: Missing executable, timeout, unexpected exit code,
            or diagnostics on stderr when ``allow_stderr`` is False
    """
    logger.debug("Running %s: %s", name, " ".join(command))
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=env,
        )
    except OSError as e:
        raise ExternalToolError(f"{name} could not be started: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        await _kill(process)
        raise ExternalToolError(f"{name} timed out after {timeout:g}s") from e
    except asyncio.CancelledError:
        await _kill(process)
        raise

    diagnostics = stderr.decode('utf-8', errors='replace').strip()
    if process.returncode not in ok_exit_codes:
        raise ExternalToolError(
            f"{name} exited with code {process.returncode}: {diagnostics or 'no diagnostics'}"
        )
    if diagnostics and not allow_stderr:
        raise ExternalToolError(f"{name} reported errors: {diagnostics}")

    return stdout.decode('utf-8', errors='replace')


async def _kill(process):
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()


def _build_command(template: Sequence[str], directory: Path) -> List[str]:
    return [
        part.replace('{path}', str(directory)).replace('{config}', str(ESLINT_CONFIG_PATH))
        for part in template
    ]


def _parse_json(name: str, output: str):
    try:
        return json.loads(output)
    except ValueError as e:
        raise ExternalToolError(f"{name} produced invalid JSON: {e}") from e


class RetireJsScanner(VulnerabilityScanner):
    """retire.js CLI adapter"""

    def __init__(self, command: Sequence[str], timeout: float = 120.0):
        self.command = list(command)
        self.timeout = timeout

    async def scan(self, directory: Path) -> list:
        output = await run_tool(
            'retire', _build_command(self.command, directory), self.timeout, RETIRE_OK_EXIT_CODES
        )
        report = _parse_json('retire', output)
        if isinstance(report, list):
            # pre-4.0 retire emits the data list directly
            return report
        if not isinstance(report, dict):
            raise ExternalToolError("retire output is not a JSON object")
        data = report.get('data') or []
        if not isinstance(data, list):
            raise ExternalToolError("retire output 'data' is not a list")
        return data


class EslintLinter(StaticLinter):
    """ESLint CLI adapter"""

    def __init__(self, command: Sequence[str], timeout: float = 120.0):
        self.command = list(command)
        self.timeout = timeout

    async def lint(self, directory: Path) -> dict:
        # eslint prints deprecation notices on stderr; only the exit code counts.
        # Patterns resolve against cwd, and eslint 9 skips files outside it.
        output = await run_tool(
            'eslint', _build_command(self.command, directory), self.timeout,
            ESLINT_OK_EXIT_CODES, allow_stderr=True,
            cwd=directory, env={**os.environ, 'ESLINT_USE_FLAT_CONFIG': 'true'},
        )
        if not output.strip():
            return summarize_lint_results([])
        results = _parse_json('eslint', output)
        if not isinstance(results, list):
            raise ExternalToolError("eslint output is not a JSON array")
        return summarize_lint_results(results)


class NullVulnerabilityScanner(VulnerabilityScanner):
    """Used when external scanners are disabled"""

    async def scan(self, directory: Path) -> list:
        return []


class NullLinter(StaticLinter):
    """Used when external scanners are disabled"""

    async def lint(self, directory: Path) -> dict:
        return summarize_lint_results([])


def build_external_tools(settings, enabled: Optional[bool] = None):
    """Scanner and linter for the given settings"""
    if enabled is None:
        enabled = settings.external_scanners_enabled
    if not enabled:
        return NullVulnerabilityScanner(), NullLinter()
    return (
        RetireJsScanner(settings.retire_command, settings.tool_timeout),
        EslintLinter(settings.eslint_command, settings.tool_timeout),
    )
