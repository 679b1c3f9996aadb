"""
Static safety analysis for TypeScript/JavaScript source.

Two independent layers produce the verdict:
  1. A syntax tree walk (tree-sitter TSX grammar, a superset of both
     languages) that flags dangerous imports, code evaluation primitives,
     sensitive global access and dynamic-scope statements.
  2. Textual heuristics over the raw source (see ``heuristics``) that catch
     obfuscation and encodings the tree walk cannot see.

``CodeAnalyzer.analyze`` never raises; parse failures, internal errors and
the time budget all surface as issues with ``safe=False``.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable

import tree_sitter_typescript
from structlog import get_logger
from structlog.typing import FilteringBoundLogger
from tree_sitter import Language as TreeSitterLanguage
from tree_sitter import Node, Parser

from code_interpreter.sandbox import heuristics
from code_interpreter.sandbox.models import AnalysisResult
from code_interpreter.sandbox.patterns import (
    CODE_EVAL_FUNCTIONS,
    CRITICAL_GLOBALS,
    DANGEROUS_GLOBALS,
    DANGEROUS_MODULES,
    MODULE_LOADER,
    TIMER_FUNCTIONS,
    is_dangerous_module,
    is_restricted_module,
)

TSX_LANGUAGE = TreeSitterLanguage(tree_sitter_typescript.language_tsx())

DEFAULT_ANALYSIS_TIMEOUT = 30.0

_PROPERTY_NODE_TYPES = frozenset({"property_identifier", "private_property_identifier", "identifier"})
_MEMBER_NODE_TYPES = frozenset({"member_expression", "subscript_expression"})


class _Findings:
    """Mutable accumulator used while a single analysis runs."""

    def __init__(self) -> None:
        self.issues: list[str] = []
        self.warnings: list[str] = []
        self._escalated: set[str] = set()

    def issue(self, message: str) -> None:
        self.issues.append(message)

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def escalate(self, root: str) -> None:
        # Reported once per root identifier
        if root in self._escalated:
            return
        self._escalated.add(root)
        self.issues.append(f"Access to {root} is not allowed")

    def freeze(self) -> AnalysisResult:
        return AnalysisResult(
            safe=not self.issues,
            issues=tuple(self.issues),
            warnings=tuple(self.warnings),
        )


def _text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace") if node.text is not None else ""


def _literal_value(node: Node | None) -> str | None:
    """Return the value of a plain string literal, or None for anything else."""
    if node is None:
        return None
    if node.type == "string":
        return _text(node)[1:-1]
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        return _text(node)[1:-1]
    return None


def _first_argument(call: Node) -> Node | None:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or arguments.type != "arguments":
        return None
    for child in arguments.named_children:
        if child.type != "comment":
            return child
    return None


def _first_syntax_error(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


class CodeAnalyzer:
    """
    Tree-walking safety analyzer with a textual heuristic sweep.

    Usage::

        analyzer = CodeAnalyzer()
        result = await analyzer.analyze("console.log(1)")
        assert result.safe
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_ANALYSIS_TIMEOUT,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._logger = logger or get_logger()
        self._handlers: dict[str, Callable[[Node, _Findings], None]] = {
            "call_expression": self._check_call,
            "import_statement": self._check_static_import,
            "import_require_clause": self._check_static_import,
            "export_statement": self._check_reexport,
            "new_expression": self._check_new,
            "member_expression": self._check_member_access,
            "subscript_expression": self._check_member_access,
            "with_statement": self._check_with,
            "debugger_statement": self._check_debugger,
            "assignment_expression": self._check_assignment,
            "augmented_assignment_expression": self._check_assignment,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def analyze(self, code: str) -> AnalysisResult:
        """Analyze ``code`` within the configured time budget."""
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(self.analyze_sync, code),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._logger.warning(
                "Code analysis timed out",
                timeout_seconds=self.timeout_seconds,
                code_length=len(code),
            )
            return AnalysisResult(safe=False, issues=("Code analysis timeout",))

        if result.issues:
            self._logger.info("Code analysis found issues", issues=list(result.issues))
        return result

    def analyze_sync(self, code: str) -> AnalysisResult:
        """Run the full analysis on the calling thread, without a time budget."""
        findings = _Findings()
        try:
            tree = Parser(TSX_LANGUAGE).parse(code.encode("utf-8"))
            error = _first_syntax_error(tree.root_node) if tree.root_node.has_error else None
            if error is not None:
                findings.issue(self._describe_syntax_error(error))
                return findings.freeze()

            self._walk(tree.root_node, findings)
        except Exception as exc:
            findings.issue(f"Code parsing error: {exc}")
            return findings.freeze()

        for message in heuristics.scan_text(code):
            findings.issue(message)

        if heuristics.is_excessively_complex(code):
            findings.warn("Code complexity is very high")

        return findings.freeze()

    @staticmethod
    def is_dangerous(code: str) -> bool:
        """Quick textual check for a literal load of a dangerous module."""
        for module in DANGEROUS_MODULES:
            pattern = (
                r"(?:require\s*\(|import\s*\(|\bfrom)\s*['\"`](?:node:)?"
                + re.escape(module)
                + r"['\"`]"
            )
            if re.search(pattern, code):
                return True
        return False

    @staticmethod
    def has_eval(code: str) -> bool:
        """Quick textual check for eval() or the Function constructor."""
        return bool(re.search(r"\beval\s*\(", code) or re.search(r"\bnew\s+Function\s*\(", code))

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _walk(self, root: Node, findings: _Findings) -> None:
        # Iterative pre-order; deeply nested input must not exhaust the stack
        stack = [root]
        while stack:
            node = stack.pop()
            handler = self._handlers.get(node.type)
            if handler is not None:
                handler(node, findings)
            stack.extend(reversed(node.named_children))

    @staticmethod
    def _describe_syntax_error(node: Node) -> str:
        row, column = node.start_point[0] + 1, node.start_point[1] + 1
        if node.is_missing:
            return f"Code parsing error: missing '{node.type}' at line {row}, column {column}"
        return f"Code parsing error: unexpected token at line {row}, column {column}"

    @staticmethod
    def _classify_module(name: str, findings: _Findings, dynamic: bool = False) -> None:
        if is_dangerous_module(name):
            kind = "dynamic import" if dynamic else "module import"
            findings.issue(f"Dangerous {kind}: {name}")
        elif not dynamic and is_restricted_module(name):
            findings.warn(f"Restricted module usage: {name}")

    def _check_call(self, node: Node, findings: _Findings) -> None:
        callee = node.child_by_field_name("function")
        if callee is None:
            return

        if callee.type == "import":
            module = _literal_value(_first_argument(node))
            if module is not None:
                self._classify_module(module, findings, dynamic=True)
            return

        if callee.type != "identifier":
            return

        name = _text(callee)
        if name == MODULE_LOADER:
            module = _literal_value(_first_argument(node))
            if module is not None:
                self._classify_module(module, findings)
        elif name in CODE_EVAL_FUNCTIONS:
            if name == "eval":
                findings.issue("eval() usage is not allowed")
            else:
                findings.issue("Function constructor usage is not allowed")
        elif name in TIMER_FUNCTIONS:
            first = _first_argument(node)
            if first is not None and first.type in ("string", "template_string"):
                findings.issue(f"{name} with string argument is not allowed")

    def _check_static_import(self, node: Node, findings: _Findings) -> None:
        source = node.child_by_field_name("source")
        if source is None:
            source = next((c for c in node.named_children if c.type == "string"), None)
        module = _literal_value(source)
        if module is not None:
            self._classify_module(module, findings)

    def _check_reexport(self, node: Node, findings: _Findings) -> None:
        module = _literal_value(node.child_by_field_name("source"))
        if module is not None:
            self._classify_module(module, findings)

    @staticmethod
    def _check_new(node: Node, findings: _Findings) -> None:
        constructor = node.child_by_field_name("constructor")
        if constructor is not None and constructor.type == "identifier" and _text(constructor) == "Function":
            findings.issue("Function constructor usage is not allowed")

    @staticmethod
    def _check_member_access(node: Node, findings: _Findings) -> None:
        obj = node.child_by_field_name("object")
        if obj is None or obj.type != "identifier":
            return
        root = _text(obj)
        if root not in DANGEROUS_GLOBALS:
            return

        if node.type == "member_expression":
            prop = node.child_by_field_name("property")
            if prop is not None and prop.type in _PROPERTY_NODE_TYPES:
                findings.warn(f"Potentially unsafe property access: {root}.{_text(prop)}")
        else:
            key = _literal_value(node.child_by_field_name("index"))
            if key is not None:
                findings.warn(f"Potentially unsafe property access: {root}['{key}']")

        if root in CRITICAL_GLOBALS:
            findings.escalate(root)

    @staticmethod
    def _check_with(node: Node, findings: _Findings) -> None:
        findings.issue("with statement is not allowed")

    @staticmethod
    def _check_debugger(node: Node, findings: _Findings) -> None:
        findings.warn("debugger statement found")

    @staticmethod
    def _check_assignment(node: Node, findings: _Findings) -> None:
        left = node.child_by_field_name("left")
        if left is None or left.type not in _MEMBER_NODE_TYPES:
            return
        obj = left.child_by_field_name("object")
        if obj is not None and obj.type == "identifier" and _text(obj) in DANGEROUS_GLOBALS:
            findings.warn(f"Assignment to potentially dangerous global: {_text(obj)}")
