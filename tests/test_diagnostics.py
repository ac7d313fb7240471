import pytest

from devpilot.ai_backends.base import FailureKind, GenerationFailure
from devpilot.utils.diagnostics import classify_error_output, describe_failure, diff_size, first_lines


@pytest.mark.parametrize("text, expected", [
    ("Error: UNAUTHENTICATED", FailureKind.AUTH),
    ("Please set an API key", FailureKind.AUTH),
    ("HTTP 429 Too Many Requests", FailureKind.RATE_LIMITED),
    ("You exceeded your current quota", FailureKind.RATE_LIMITED),
    ("connect ECONNREFUSED 127.0.0.1:443", FailureKind.NETWORK),
    ("Network is unreachable", FailureKind.NETWORK),
    ("TypeError: cannot read properties of undefined", FailureKind.UNKNOWN),
    ("", FailureKind.UNKNOWN),
])
def test_classify_error_output(text, expected):
    assert classify_error_output(text) == expected


@pytest.mark.parametrize("exit_code", [126, 127])
def test_cannot_execute_exit_codes_mean_missing_tool(exit_code):
    assert classify_error_output("401 unauthorized", exit_code=exit_code) == FailureKind.TOOL_MISSING


@pytest.mark.parametrize("text", [
    "Error reading ~/.gemini/settings.json: ENOENT: no such file or directory",
    "gemini: command not found",
    "SyntaxError: Unexpected token at position 4013",
    "    at handle (loginFlow.js:12)",
    "Processed 14290 tokens",
    "rendered 4031 characters",
])
def test_ordinary_error_output_stays_unknown(text):
    assert classify_error_output(text, exit_code=1) == FailureKind.UNKNOWN


@pytest.mark.parametrize("text, expected", [
    ("HTTP 403 Forbidden", FailureKind.AUTH),
    ("GEMINI_API_KEY is not set", FailureKind.AUTH),
    ("status: 429", FailureKind.RATE_LIMITED),
    ("Rate limited, retry later", FailureKind.RATE_LIMITED),
])
def test_status_codes_and_words_match_whole_tokens(text, expected):
    assert classify_error_output(text, exit_code=1) == expected


def test_first_lines_skips_blank_lines():
    assert first_lines("\n a \n\n b\n c\n d\n e\n f\n", count=3) == [" a", " b", " c"]


def test_diff_size():
    assert diff_size("") == "0 lines, 0.0 KiB"
    assert diff_size("a\nb") == "2 lines, 0.0 KiB"


def test_timeout_diagnostic_reports_diff_size_and_suggests_splitting():
    diff = "+line\n" * 2048
    lines = describe_failure(GenerationFailure(FailureKind.TIMEOUT, "No response within 60s"), diff, "gemini")

    assert "gemini" in lines[0]
    assert any("2,049 lines" in line for line in lines)
    assert any("splitting" in line for line in lines)


@pytest.mark.parametrize("kind, fragment", [
    (FailureKind.AUTH, "authentication"),
    (FailureKind.RATE_LIMITED, "rate limited"),
    (FailureKind.NETWORK, "network"),
    (FailureKind.TOOL_MISSING, "not available"),
])
def test_each_failure_class_has_its_own_headline(kind, fragment):
    lines = describe_failure(GenerationFailure(kind), "diff", "gemini")
    assert fragment in lines[0]


def test_unknown_failure_shows_first_lines_of_error_output():
    detail = "\n".join(f"line {i}" for i in range(1, 10))
    lines = describe_failure(GenerationFailure(FailureKind.UNKNOWN, detail, exit_code=3), "diff", "gemini")

    assert "exit status 3" in lines[0]
    assert "  line 1" in lines
    assert "  line 5" in lines
    assert "  line 6" not in lines


def test_unknown_failure_without_output():
    lines = describe_failure(GenerationFailure(FailureKind.UNKNOWN), "diff", "gemini")
    assert lines[-1] == "No error output was captured."
