"""
Textual heuristics applied to raw source text.

These sweeps run independently of the syntax tree walk. They target tricks a
structural pass cannot see: escaped or encoded payloads, module names built at
runtime, prototype tampering and I/O spelled out in text. Every heuristic is
broad: legitimate long literals (hashes, tokens, long runs of
punctuation in banners) are rejected too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MAX_LINES_OF_CODE = 1000
MAX_BRANCH_TOKENS = 50


@dataclass(frozen=True)
class TextHeuristic:
    """A family of patterns reported as one issue."""

    name: str
    message: str
    patterns: tuple[re.Pattern[str], ...]

    def matches(self, code: str) -> bool:
        return any(pattern.search(code) for pattern in self.patterns)


def _compile(*patterns: str, flags: int = 0) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, flags) for p in patterns)


OBFUSCATION = TextHeuristic(
    name="obfuscation",
    message="Obfuscated code pattern detected",
    patterns=_compile(
        r"\\x[0-9a-fA-F]{2}",
        r"\\u[0-9a-fA-F]{4}",
        r"\\u\{[0-9a-fA-F]+\}",
        r"\\[0-7]{1,3}",
        r"['\"][^'\"\n]*\\[xuU][^'\"\n]*['\"]",
        r"[_$][a-zA-Z0-9_$]{20,}",
        r"[^a-zA-Z0-9\s]{20,}",
        r"\\x65\\x76\\x61\\x6c",
        r"\\u0065\\u0076\\u0061\\u006c",
        r"String\s*\.\s*fromCharCode",
        r"String\s*\.\s*fromCodePoint",
        r"\[\s*\d+\s*\]\s*\[\s*\d+\s*\]",
    ),
)

BASE64_PAYLOAD = TextHeuristic(
    name="base64",
    message="Base64 encoded payload detected",
    patterns=_compile(r"[A-Za-z0-9+/]{20,}={0,2}"),
)

PROTOTYPE_POLLUTION = TextHeuristic(
    name="prototype-pollution",
    message="Prototype pollution attempt detected",
    patterns=_compile(
        r"prototype\s*\[\s*['\"]constructor['\"]\s*\]",
        r"prototype\s*\[\s*['\"]__proto__['\"]\s*\]",
        r"\.\s*__proto__\b",
        r"\[\s*['\"]__proto__['\"]\s*\]",
        r"prototype\s*\.\s*constructor",
        r"\b(?:Object|Array|String|Number|Boolean|Function|Symbol|Promise"
        r"|RegExp|Date|Error|Map|Set)\s*\.\s*prototype\b",
    ),
)

PATH_TRAVERSAL = TextHeuristic(
    name="path-traversal",
    message="Path traversal attempt detected",
    patterns=_compile(
        r"\.\./",
        r"\.\.\\",
        r"\.\.%2[fF]",
        r"\.\.%5[cC]",
        r"%2[eE]%2[eE](?:%2[fF]|%5[cC]|/|\\)",
    ),
)

NETWORK_ACCESS = TextHeuristic(
    name="network",
    message="Network access is not allowed",
    patterns=_compile(
        r"\bhttps?\s*\.\s*createServer",
        r"\bnet\s*\.\s*(?:createServer|createConnection|connect|Socket)\b",
        r"require\s*\(\s*['\"](?:node:)?(?:https?|net)['\"]\s*\)",
        r"\bfs\s*\.\s*(?:readFile|writeFile|appendFile|unlink|mkdir|rmdir|rm)\b",
        r"\bfs\s*\.\s*(?:readFileSync|writeFileSync|appendFileSync|unlinkSync"
        r"|mkdirSync|rmdirSync|rmSync)\b",
        r"require\s*\(\s*['\"](?:node:)?fs(?:/promises)?['\"]\s*\)",
        r"\bimport\b[^;\n]*\bfrom\s*['\"](?:node:)?fs(?:/promises)?['\"]",
    ),
)

FETCH_API = TextHeuristic(
    name="fetch",
    message="Network fetch is not allowed",
    patterns=_compile(
        r"\bfetch\s*\(",
        r"\bXMLHttpRequest\s*\(",
        r"\bWebSocket\s*\(",
    ),
)

# Order defines the order issues are reported in
BLOCKING_HEURISTICS: tuple[TextHeuristic, ...] = (
    OBFUSCATION,
    BASE64_PAYLOAD,
    PROTOTYPE_POLLUTION,
    PATH_TRAVERSAL,
    NETWORK_ACCESS,
    FETCH_API,
)

_BRANCH_KEYWORDS = re.compile(r"\b(?:if|else|for|while|switch|case|catch)\b")
_BOOLEAN_OPERATORS = re.compile(r"&&|\|\|")


def scan_text(code: str) -> list[str]:
    """Return one issue message per blocking heuristic that matches."""
    return [h.message for h in BLOCKING_HEURISTICS if h.matches(code)]


def branch_token_count(code: str) -> int:
    return len(_BRANCH_KEYWORDS.findall(code)) + len(_BOOLEAN_OPERATORS.findall(code))


def is_excessively_complex(code: str) -> bool:
    """Line-count and branch-count ceiling; advisory only."""
    lines_of_code = sum(1 for line in code.splitlines() if line.strip())
    return lines_of_code > MAX_LINES_OF_CODE or branch_token_count(code) > MAX_BRANCH_TOKENS
