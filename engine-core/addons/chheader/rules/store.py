import asyncio
from typing import Dict, List, Protocol, Sequence

from ..errors import RuleStoreError
from ..utils import setup_logging
from .models import RESOURCE_TYPE_ALIASES, RESOURCE_TYPES, CompiledRule
from .url_filter import url_filter_matches

MIN_RULE_ID = 1
MAX_RULE_ID = 2147483647
DEFAULT_MAX_RULES = 5000

HEADER_OPERATIONS = ("set", "append", "remove")


def _covers(resource_types: Sequence[str], resource_type: str) -> bool:
    return any(RESOURCE_TYPE_ALIASES.get(t, t) == resource_type for t in resource_types)


class RuleStore(Protocol):
    """What the applier needs from the engine that enforces rules."""

    async def get_current_rule_ids(self) -> List[int]:
        ...

    async def replace_rules(self, remove_ids: Sequence[int], add_rules: Sequence[CompiledRule]) -> None:
        ...


class DynamicRuleStore:
    """In-process declarative rule engine.

    Installed rules live in a single dict that is swapped wholesale on every
    update, so readers on the request path always see either the old or the
    new set. Updates are serialized by an asyncio lock and validated in full
    before the swap; a rejected update leaves the installed set untouched.
    """

    def __init__(self, max_rules: int = DEFAULT_MAX_RULES):
        self.logger = setup_logging()
        self.max_rules = max_rules
        self._rules: Dict[int, CompiledRule] = {}
        self._lock = asyncio.Lock()
        self.version = 0

    async def get_current_rule_ids(self) -> List[int]:
        return list(self._rules)

    async def get_rules(self) -> List[CompiledRule]:
        return list(self._rules.values())

    async def replace_rules(self, remove_ids: Sequence[int], add_rules: Sequence[CompiledRule]) -> None:
        async with self._lock:
            removing = set(remove_ids)
            updated = {rid: rule for rid, rule in self._rules.items() if rid not in removing}

            for rule in add_rules:
                self.validate_rule(rule)
                if rule.id in updated:
                    raise RuleStoreError(f"Rule with id {rule.id} already exists")
                updated[rule.id] = rule

            if len(updated) > self.max_rules:
                raise RuleStoreError(
                    f"Rule count {len(updated)} exceeds the maximum of {self.max_rules} dynamic rules"
                )

            self._rules = updated
            self.version += 1
            self.logger.debug(f"rule store v{self.version}: {len(updated)} rule(s) installed")

    def validate_rule(self, rule: CompiledRule) -> None:
        if not isinstance(rule.id, int) or isinstance(rule.id, bool) or not MIN_RULE_ID <= rule.id <= MAX_RULE_ID:
            raise RuleStoreError(f"Rule id {rule.id!r} is outside [{MIN_RULE_ID}, {MAX_RULE_ID}]")

        resource_types = rule.condition.resource_types
        if not resource_types:
            raise RuleStoreError(f"Rule {rule.id}: resourceTypes cannot be empty")
        unknown = sorted(set(resource_types) - RESOURCE_TYPES)
        if unknown:
            raise RuleStoreError(f"Rule {rule.id}: unknown resource type(s) {', '.join(unknown)}")

        if rule.action.is_empty:
            raise RuleStoreError(f"Rule {rule.id}: modifyHeaders action needs at least one header operation")

        for op in (rule.action.request_headers or ()) + (rule.action.response_headers or ()):
            if not op.header or not op.header.strip():
                raise RuleStoreError(f"Rule {rule.id}: header name cannot be empty")
            if op.operation not in HEADER_OPERATIONS:
                raise RuleStoreError(f"Rule {rule.id}: unsupported header operation {op.operation!r}")

    def matching_rules(self, url: str, resource_type: str) -> List[CompiledRule]:
        """Installed rules whose condition covers url, highest priority first."""
        rules = self._rules
        matched = [
            r for r in rules.values()
            if _covers(r.condition.resource_types, resource_type) and url_filter_matches(r.condition.url_filter, url)
        ]
        matched.sort(key=lambda r: (-r.priority, r.id))
        return matched
