import time

import pytest

from code_interpreter.sandbox.analyzer import CodeAnalyzer
from code_interpreter.sandbox.models import AnalysisResult


@pytest.fixture
def analyzer():
    return CodeAnalyzer(timeout_seconds=5.0)


def test_empty_input_is_safe(analyzer):
    assert analyzer.analyze_sync("") == AnalysisResult(safe=True)


def test_plain_console_output_is_safe(analyzer):
    result = analyzer.analyze_sync('const total = [1, 2, 3].map(n => n * 2);\nconsole.log(total);')
    assert result.safe
    assert result.issues == ()
    assert result.warnings == ()


def test_typescript_annotations_parse(analyzer):
    code = "interface Point { x: number; y: number }\nconst p: Point = { x: 1, y: 2 };\nconsole.log(p.x + p.y);"
    assert analyzer.analyze_sync(code).safe


@pytest.mark.parametrize("code", [
    'const cp = require("child_process");',
    "import { exec } from 'child_process';",
    "import cp = require('child_process');",
    "export { exec } from 'child_process';",
])
def test_dangerous_module_forms_are_blocked(analyzer, code):
    result = analyzer.analyze_sync(code)
    assert not result.safe
    assert "Dangerous module import: child_process" in result.issues


def test_node_prefixed_dangerous_module_is_blocked(analyzer):
    result = analyzer.analyze_sync("import vm from 'node:vm';")
    assert not result.safe
    assert "Dangerous module import: node:vm" in result.issues


def test_dynamic_import_of_dangerous_module(analyzer):
    result = analyzer.analyze_sync('import("worker_threads").then(m => m);')
    assert not result.safe
    assert "Dangerous dynamic import: worker_threads" in result.issues


def test_restricted_module_is_a_warning(analyzer):
    result = analyzer.analyze_sync('import path from "path";\nconsole.log(path.sep);')
    assert result.safe
    assert "Restricted module usage: path" in result.warnings


def test_restricted_module_warning_survives_an_unsafe_verdict(analyzer):
    result = analyzer.analyze_sync('const fs = require("fs");\nfs.readFileSync("data.txt");')
    assert not result.safe
    assert "Network access is not allowed" in result.issues
    assert "Restricted module usage: fs" in result.warnings


def test_computed_module_name_is_not_classified(analyzer):
    result = analyzer.analyze_sync("const name = 'cluster';\nconst m = require(name);")
    assert result.safe


def test_eval_is_blocked(analyzer):
    result = analyzer.analyze_sync('eval("1+1")')
    assert not result.safe
    assert result.issues == ("eval() usage is not allowed",)


@pytest.mark.parametrize("code", ['new Function("return 1")', 'Function("return 1")()'])
def test_function_constructor_is_blocked(analyzer, code):
    result = analyzer.analyze_sync(code)
    assert "Function constructor usage is not allowed" in result.issues


def test_timer_with_string_argument_is_blocked(analyzer):
    result = analyzer.analyze_sync('setTimeout("alert(1)", 10);')
    assert "setTimeout with string argument is not allowed" in result.issues


def test_timer_with_callback_is_safe(analyzer):
    assert analyzer.analyze_sync("setTimeout(() => console.log(1), 10);").safe


def test_process_access_is_reported_once(analyzer):
    result = analyzer.analyze_sync("console.log(process.env.HOME);\nprocess.exit(0);")
    assert not result.safe
    assert result.issues.count("Access to process is not allowed") == 1
    assert "Potentially unsafe property access: process.env" in result.warnings
    assert "Potentially unsafe property access: process.exit" in result.warnings


def test_subscript_access_uses_bracket_form(analyzer):
    result = analyzer.analyze_sync("const v = global['setTimeout'];")
    assert "Potentially unsafe property access: global['setTimeout']" in result.warnings
    assert "Access to global is not allowed" in result.issues


def test_non_critical_global_access_is_a_warning(analyzer):
    result = analyzer.analyze_sync("globalThis.answer = 42;")
    assert result.safe
    assert "Assignment to potentially dangerous global: globalThis" in result.warnings
    assert "Potentially unsafe property access: globalThis.answer" in result.warnings


def test_with_statement_is_blocked(analyzer):
    result = analyzer.analyze_sync("with (Math) { console.log(PI); }")
    assert "with statement is not allowed" in result.issues


def test_debugger_is_a_warning(analyzer):
    result = analyzer.analyze_sync("debugger;")
    assert result.safe
    assert result.warnings == ("debugger statement found",)


def test_parse_error_short_circuits(analyzer):
    result = analyzer.analyze_sync('function (\neval("x")')
    assert not result.safe
    assert len(result.issues) == 1
    assert result.issues[0].startswith("Code parsing error:")
    assert "line" in result.issues[0]


def test_textual_heuristics_feed_issues(analyzer):
    result = analyzer.analyze_sync('const s = "\\x65val";')
    assert "Obfuscated code pattern detected" in result.issues


def test_fetch_is_blocked(analyzer):
    result = analyzer.analyze_sync('fetch("https://example.com").then(r => r.text());')
    assert "Network fetch is not allowed" in result.issues


def test_high_complexity_is_a_warning(analyzer):
    code = "let a = 1;\n" + "if (a) { a++; }\n" * 60
    result = analyzer.analyze_sync(code)
    assert result.safe
    assert "Code complexity is very high" in result.warnings


def test_analysis_is_deterministic(analyzer):
    code = 'const cp = require("child_process");\nimport os from "os";\ndebugger;'
    assert analyzer.analyze_sync(code) == analyzer.analyze_sync(code)


@pytest.mark.asyncio
async def test_analyze_matches_sync_result(analyzer):
    code = 'eval("2")'
    assert await analyzer.analyze(code) == analyzer.analyze_sync(code)


@pytest.mark.asyncio
async def test_analyze_timeout_becomes_an_issue(monkeypatch):
    analyzer = CodeAnalyzer(timeout_seconds=0.05)

    def slow(code):
        time.sleep(0.5)
        return AnalysisResult(safe=True)

    monkeypatch.setattr(analyzer, "analyze_sync", slow)
    result = await analyzer.analyze("console.log(1)")
    assert result == AnalysisResult(safe=False, issues=("Code analysis timeout",))


def test_quick_predicates():
    assert CodeAnalyzer.is_dangerous("const x = require('child_process')")
    assert CodeAnalyzer.is_dangerous("import cluster from 'node:cluster'")
    assert not CodeAnalyzer.is_dangerous("const x = require('path')")
    assert CodeAnalyzer.has_eval("eval ('1')")
    assert CodeAnalyzer.has_eval("new Function('a', 'return a')")
    assert not CodeAnalyzer.has_eval("const evaluate = 1")
