"""The declarative engine's urlFilter grammar.

This is what installed rules are evaluated with, as opposed to the
user-facing formats in matcher.py:

    *      any run of characters
    ^      separator: anything but a letter, digit, "_", "-", ".", "%", or the end
    |x     anchored at the start of the URL
    x|     anchored at the end of the URL
    ||x    anchored at the start of the host or at a subdomain boundary

Without anchors the filter matches anywhere in the URL. Matching is
case-insensitive. An empty filter or "*" matches every URL.
"""
import re
from functools import lru_cache

_SEPARATOR = r"(?:[^A-Za-z0-9_\-.%]|$)"
_DOMAIN_ANCHOR = r"^[a-z][a-z0-9+.\-]*://(?:[^/?#]*\.)?"


def url_filter_to_regex(url_filter: str) -> str:
    f = url_filter
    prefix = ""
    suffix = ""

    if f.startswith("||"):
        prefix = _DOMAIN_ANCHOR
        f = f[2:]
    elif f.startswith("|"):
        prefix = "^"
        f = f[1:]

    if f.endswith("|"):
        suffix = "$"
        f = f[:-1]

    parts = []
    for ch in f:
        if ch == "*":
            parts.append(".*")
        elif ch == "^":
            parts.append(_SEPARATOR)
        else:
            parts.append(re.escape(ch))
    return prefix + "".join(parts) + suffix


@lru_cache(maxsize=1024)
def compile_url_filter(url_filter: str) -> "re.Pattern[str]":
    return re.compile(url_filter_to_regex(url_filter), re.IGNORECASE)


def url_filter_matches(url_filter: str, url: str) -> bool:
    if not url_filter or url_filter == "*":
        return True
    return compile_url_filter(url_filter).search(url) is not None
