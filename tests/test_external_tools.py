import asyncio
import json
import sys

import pytest

from extension_risk.config import DEFAULT_ESLINT_COMMAND, Settings
from extension_risk.errors import ExternalToolError
from extension_risk.external_tools import (
    ESLINT_CONFIG_PATH,
    EslintLinter,
    NullLinter,
    NullVulnerabilityScanner,
    RetireJsScanner,
    build_external_tools,
    run_tool,
    summarize_lint_results,
)


def python_command(code):
    """Command template that runs a snippet with the current interpreter"""
    return [sys.executable, "-c", code, "{path}"]


def test_summarize_lint_results():
    results = [
        {"filePath": "a.js", "messages": [
            {"ruleId": "security/detect-eval-with-expression", "severity": 2},
            {"ruleId": "security/detect-object-injection", "severity": 1},
        ]},
        {"filePath": "b.js", "messages": [
            {"ruleId": "security/detect-object-injection", "severity": 1},
            {"ruleId": None, "severity": 2, "message": "Parsing error"},
        ]},
        {"filePath": "c.js", "messages": []},
    ]
    assert summarize_lint_results(results) == {
        'totalIssues': 4,
        'errors': 2,
        'warnings': 2,
        'commonIssues': {
            'security/detect-eval-with-expression': 1,
            'security/detect-object-injection': 2,
            'null': 1,
        },
    }


def test_retire_scanner_parses_data(tmp_path):
    report = {"version": "4.0", "data": [{"file": "a.js", "results": []}]}
    code = f"import sys; print({json.dumps(json.dumps(report))}); sys.exit(13)"
    scanner = RetireJsScanner(python_command(code), timeout=30)

    assert asyncio.run(scanner.scan(tmp_path)) == report["data"]


def test_retire_scanner_passes_directory(tmp_path):
    code = "import json, sys; print(json.dumps({'data': [{'file': sys.argv[1]}]}))"
    scanner = RetireJsScanner(python_command(code), timeout=30)

    assert asyncio.run(scanner.scan(tmp_path)) == [{'file': str(tmp_path)}]


def test_retire_stderr_is_failure(tmp_path):
    code = "import sys; sys.stderr.write('boom'); print('{}')"
    scanner = RetireJsScanner(python_command(code), timeout=30)

    with pytest.raises(ExternalToolError, match="boom"):
        asyncio.run(scanner.scan(tmp_path))


def test_retire_invalid_json(tmp_path):
    scanner = RetireJsScanner(python_command("print('not json')"), timeout=30)

    with pytest.raises(ExternalToolError):
        asyncio.run(scanner.scan(tmp_path))


def test_eslint_nonzero_exit_is_failure(tmp_path):
    linter = EslintLinter(python_command("import sys; sys.exit(2)"), timeout=30)

    with pytest.raises(ExternalToolError, match="code 2"):
        asyncio.run(linter.lint(tmp_path))


def test_eslint_summary(tmp_path):
    output = [{"messages": [{"ruleId": "r", "severity": 2}]}]
    code = f"import sys; print({json.dumps(json.dumps(output))}); sys.exit(1)"
    linter = EslintLinter(python_command(code), timeout=30)

    summary = asyncio.run(linter.lint(tmp_path))
    assert summary['totalIssues'] == 1
    assert summary['errors'] == 1


def test_tool_timeout(tmp_path):
    command = python_command("import time; time.sleep(30)")

    with pytest.raises(ExternalToolError, match="timed out"):
        asyncio.run(run_tool("sleeper", command, 0.5, (0,)))


def test_missing_executable():
    with pytest.raises(ExternalToolError, match="could not be started"):
        asyncio.run(run_tool("ghost", ["definitely-not-a-real-tool-xyz"], 5, (0,)))


def test_build_external_tools():
    scanner, linter = build_external_tools(Settings())
    assert isinstance(scanner, RetireJsScanner)
    assert isinstance(linter, EslintLinter)

    scanner, linter = build_external_tools(Settings(external_scanners_enabled=False))
    assert isinstance(scanner, NullVulnerabilityScanner)
    assert isinstance(linter, NullLinter)
    assert asyncio.run(linter.lint(None))['totalIssues'] == 0


def test_default_eslint_command_uses_bundled_config():
    assert DEFAULT_ESLINT_COMMAND[0] == "eslint"
    config_index = DEFAULT_ESLINT_COMMAND.index("--config")
    assert DEFAULT_ESLINT_COMMAND[config_index + 1] == "{config}"
    # an explicit flat config must not be combined with --no-config-lookup
    assert "--no-config-lookup" not in DEFAULT_ESLINT_COMMAND
    assert "--no-eslintrc" not in DEFAULT_ESLINT_COMMAND


def test_bundled_eslint_config_enables_security_plugin():
    assert ESLINT_CONFIG_PATH.is_file()
    text = ESLINT_CONFIG_PATH.read_text()
    assert 'require("eslint-plugin-security")' in text
    assert "security.configs.recommended" in text


def test_eslint_receives_config_path_and_runs_in_directory(tmp_path, monkeypatch):
    captured = []

    async def recording_run_tool(name, command, timeout, ok_exit_codes, allow_stderr=False,
                                 cwd=None, env=None):
        captured.append((command, cwd, env))
        return "[]"

    monkeypatch.setattr("extension_risk.external_tools.run_tool", recording_run_tool)
    linter = EslintLinter(DEFAULT_ESLINT_COMMAND, timeout=30)

    assert asyncio.run(linter.lint(tmp_path))["totalIssues"] == 0

    command, cwd, env = captured[0]
    assert command[command.index("--config") + 1] == str(ESLINT_CONFIG_PATH)
    assert command[-1] == "**/*.js"
    assert cwd == tmp_path
    assert env["ESLINT_USE_FLAT_CONFIG"] == "true"


def test_run_tool_uses_working_directory(tmp_path):
    output = asyncio.run(run_tool(
        "pwd", [sys.executable, "-c", "import os; print(os.getcwd())"], 30, (0,), cwd=tmp_path,
    ))
    assert output.strip() == str(tmp_path.resolve())
