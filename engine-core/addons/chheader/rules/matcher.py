"""URL filter patterns as the user writes them.

Three formats are recognised, checked in this order:
  - regex:    "regex:" prefix, the rest is a search pattern
  - wildcard: contains "*", anchored at both ends
  - simple:   anything else, matched as a substring
All comparisons are case-insensitive. Nothing here raises on bad input:
validation returns a result and evaluation of a broken pattern is a miss.
"""
import re
from enum import Enum
from functools import lru_cache
from typing import List, NamedTuple, Optional

REGEX_PREFIX = "regex:"

_RESERVED_CHARS = re.compile(r"[\[\]{}()]")


class MatcherFormat(str, Enum):
    SIMPLE = "simple"
    WILDCARD = "wildcard"
    REGEX = "regex"


class ValidationResult(NamedTuple):
    valid: bool
    error: Optional[str] = None


class MatchResult(NamedTuple):
    matches: bool
    format: MatcherFormat


_FORMAT_NAMES = {
    MatcherFormat.SIMPLE: "Simple",
    MatcherFormat.WILDCARD: "Wildcard",
    MatcherFormat.REGEX: "Regex",
}

_FORMAT_HELP = {
    MatcherFormat.SIMPLE: "Match by domain or host. Example: localhost:3002",
    MatcherFormat.WILDCARD: "Use * as wildcard. Example: localhost:3002/* or *.api.example.com",
    MatcherFormat.REGEX: "Full regex pattern. Example: regex:localhost:30(0[0-9])",
}


def detect_format(pattern: str) -> MatcherFormat:
    if not pattern:
        return MatcherFormat.SIMPLE
    if pattern.startswith(REGEX_PREFIX):
        return MatcherFormat.REGEX
    if "*" in pattern:
        return MatcherFormat.WILDCARD
    return MatcherFormat.SIMPLE


def validate_pattern(pattern: str) -> ValidationResult:
    if not pattern:
        return ValidationResult(False, "Pattern cannot be empty.")

    if detect_format(pattern) == MatcherFormat.REGEX:
        try:
            re.compile(pattern[len(REGEX_PREFIX):])
        except re.error as e:
            return ValidationResult(False, f"Invalid regex: {e}")
        return ValidationResult(True)

    if _RESERVED_CHARS.search(pattern):
        return ValidationResult(False, "Invalid characters. Use 'regex:' prefix for complex patterns.")

    return ValidationResult(True)


def wildcard_to_regex(pattern: str) -> str:
    """Translate a wildcard pattern into an anchored regular expression.

    Everything but "*" is literal. A leading or trailing "|" is an explicit
    anchor, which the surrounding ^...$ already implies.
    """
    body = re.escape(pattern).replace(r"\*", ".*")
    if body.startswith(r"\|"):
        body = "^" + body[2:]
    if body.endswith(r"\|"):
        body = body[:-2] + "$"
    return f"^{body}$"


@lru_cache(maxsize=512)
def _compile(pattern: str, fmt: MatcherFormat) -> "re.Pattern[str]":
    if fmt == MatcherFormat.REGEX:
        return re.compile(pattern[len(REGEX_PREFIX):], re.IGNORECASE)
    return re.compile(wildcard_to_regex(pattern), re.IGNORECASE)


def match_url(pattern: str, url: str) -> MatchResult:
    """Match url against pattern, reporting the format that was used."""
    fmt = detect_format(pattern)

    if fmt == MatcherFormat.SIMPLE:
        p, u = pattern.lower(), url.lower()
        return MatchResult(u == p or p in u or u.startswith(p), fmt)

    try:
        compiled = _compile(pattern, fmt)
    except re.error:
        return MatchResult(False, fmt)

    if fmt == MatcherFormat.REGEX:
        return MatchResult(compiled.search(url) is not None, fmt)
    return MatchResult(compiled.match(url) is not None, fmt)


def evaluate(pattern: str, url: str) -> bool:
    return match_url(pattern, url).matches


def generate_examples(pattern: str) -> List[str]:
    """Illustrative URLs for a pattern, shown next to the matcher input."""
    fmt = detect_format(pattern)

    if fmt == MatcherFormat.SIMPLE:
        return [e for e in (pattern, f"{pattern}/api", f"{pattern}/api/users", f"{pattern}/admin") if e]
    if fmt == MatcherFormat.WILDCARD:
        base = pattern.replace("*", "example")
        return [base, f"{base}/api", f"{base}/users"]
    return [pattern]


def get_format_name(fmt: MatcherFormat) -> str:
    return _FORMAT_NAMES[MatcherFormat(fmt)]


def get_format_help(fmt: MatcherFormat) -> str:
    return _FORMAT_HELP[MatcherFormat(fmt)]
