"""
Failure classification and user-facing diagnostics for generation errors.

CLI tools only give us free-form error text, so classification there falls
back to pattern matching. Backends that expose structured errors (HTTP
status codes) classify directly and skip this module's matcher.
"""

import re
from typing import List, Optional

from ..ai_backends.base import FailureKind, GenerationFailure


# Checked in order; the first class with a matching pattern wins. Anything
# unmatched stays UNKNOWN so the raw error output is shown to the user.
ERROR_PATTERNS = [
    (FailureKind.AUTH, re.compile(
        r"\b(unauthenticated|unauthori[sz]ed|authentication|invalid credentials|permission denied|40[13])\b"
        r"|api[ _-]?key",
        re.IGNORECASE,
    )),
    (FailureKind.RATE_LIMITED, re.compile(
        r"\b(rate[ _-]?limit(ed)?|429|quota|resource_exhausted|too many requests)\b",
        re.IGNORECASE,
    )),
    (FailureKind.NETWORK, re.compile(
        r"\b(network|connection (refused|reset)|econnrefused|econnreset|enotfound|etimedout"
        r"|getaddrinfo|socket hang up|could not resolve|unreachable)\b",
        re.IGNORECASE,
    )),
]

# Shell conventions for "cannot execute" and "command not found"
TOOL_MISSING_EXIT_CODES = (126, 127)

ERROR_PREVIEW_LINES = 5


def classify_error_output(error_output: str, exit_code: Optional[int] = None) -> FailureKind:
    """Map raw error text from an opaque tool to a failure class."""
    if exit_code in TOOL_MISSING_EXIT_CODES:
        return FailureKind.TOOL_MISSING

    for kind, pattern in ERROR_PATTERNS:
        if pattern.search(error_output):
            return kind
    return FailureKind.UNKNOWN


def first_lines(text: str, count: int = ERROR_PREVIEW_LINES) -> List[str]:
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    return lines[:count]


def diff_size(diff: str) -> str:
    lines = diff.count('\n') + 1 if diff else 0
    kib = len(diff.encode('utf-8')) / 1024
    return f"{lines:,} lines, {kib:.1f} KiB"


def describe_failure(failure: GenerationFailure, diff: str, tool: str) -> List[str]:
    """Diagnostic lines for ``failure``; the first line is the headline."""
    kind = failure.kind

    if kind == FailureKind.TIMEOUT:
        return [
            f"{tool} did not answer in time ({failure.detail})",
            f"Staged diff size: {diff_size(diff)}",
            "Large diffs take longer to process. Consider splitting the change "
            "into smaller commits.",
        ]

    if kind == FailureKind.AUTH:
        return [
            f"{tool} rejected the request: authentication failed",
            "Log in again or check that your API key is set and valid.",
        ]

    if kind == FailureKind.RATE_LIMITED:
        return [
            f"{tool} is rate limited or out of quota",
            "Wait a moment before retrying, or check your plan's usage limits.",
        ]

    if kind == FailureKind.NETWORK:
        return [
            f"Could not reach {tool}: network error",
            "Check your internet connection, proxy and firewall settings.",
        ]

    if kind == FailureKind.TOOL_MISSING:
        return [
            f"{tool} is not available",
            "Install it or point generator.command at the right executable.",
        ]

    lines = [f"{tool} failed" + (f" with exit status {failure.exit_code}" if failure.exit_code else "")]
    preview = first_lines(failure.detail)
    if preview:
        lines.append("Error output:")
        lines.extend(f"  {line}" for line in preview)
    else:
        lines.append("No error output was captured.")
    return lines
