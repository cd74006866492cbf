"""Compile a profile into declarative header rules.

One rule is emitted per distinct matcher. Every rule of a profile carries
the same action: the profile's enabled request and response header edits,
each as a "set" (upsert) operation.
"""
from typing import Iterable, List, Optional, Tuple

from .models import (
    DEFAULT_RESOURCE_TYPES,
    MATCH_ALL_FILTER,
    UPSERT,
    CompiledRule,
    HeaderEdit,
    HeaderOperation,
    Matcher,
    Profile,
    RuleAction,
    RuleCondition,
)

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
MAX_RULE_ID = 2147483647

RULE_PRIORITY = 1
ALL_SITES_MATCHER = Matcher(id="__all__", url_filter=MATCH_ALL_FILTER, resource_types=DEFAULT_RESOURCE_TYPES)


def fnv1a_32(data: bytes) -> int:
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


def hash_to_int(s: str) -> int:
    """Stable rule id for a key string, always within [1, MAX_RULE_ID]."""
    return (abs(fnv1a_32(s.encode("utf-8"))) % (MAX_RULE_ID - 1)) + 1


def rule_id_for(profile_id: str, matcher_id: str) -> int:
    return hash_to_int(f"{profile_id}:{matcher_id}:reqres")


def build_header_operations(edits: Iterable[HeaderEdit]) -> Tuple[HeaderOperation, ...]:
    """Enabled edits with a non-blank name, in order, as upserts."""
    return tuple(
        HeaderOperation(header=h.header, value=h.value, operation=UPSERT)
        for h in edits
        if h.is_active
    )


def unique_matchers(matchers: Iterable[Matcher]) -> List[Matcher]:
    seen = set()
    result = []
    for m in matchers:
        if m.id in seen:
            continue
        seen.add(m.id)
        result.append(m)
    return result


def build_condition(matcher: Matcher) -> RuleCondition:
    return RuleCondition(
        url_filter=matcher.url_filter or MATCH_ALL_FILTER,
        resource_types=tuple(matcher.resource_types) or DEFAULT_RESOURCE_TYPES,
    )


def build_rules_from_profile(profile: Optional[Profile]) -> List[CompiledRule]:
    if profile is None:
        return []

    request_ops = build_header_operations(profile.request_headers)
    response_ops = build_header_operations(profile.response_headers)

    # Nothing to modify, nothing to install
    if not request_ops and not response_ops:
        return []

    matchers = unique_matchers(profile.matchers) if profile.matchers else [ALL_SITES_MATCHER]
    action = RuleAction.modify_headers(request_ops, response_ops)

    return [
        CompiledRule(
            id=rule_id_for(profile.id, m.id),
            priority=RULE_PRIORITY,
            condition=build_condition(m),
            action=action,
        )
        for m in matchers
    ]
