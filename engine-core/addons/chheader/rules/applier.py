from collections import Counter
from typing import Iterable, List, NamedTuple, Tuple

from ..errors import DuplicateRuleIdError
from ..utils import setup_logging
from .models import CompiledRule
from .store import RuleStore


class ApplyResult(NamedTuple):
    applied: int
    removed: int
    skipped_ids: Tuple[int, ...] = ()


def dedupe_rules(rules: Iterable[CompiledRule]) -> Tuple[List[CompiledRule], List[int]]:
    """Keep the first rule for each id. Returns (unique rules, skipped ids)."""
    seen = set()
    unique: List[CompiledRule] = []
    skipped: List[int] = []
    for rule in rules:
        if rule.id in seen:
            skipped.append(rule.id)
            continue
        seen.add(rule.id)
        unique.append(rule)
    return unique, skipped


def assert_unique_ids(rules: Iterable[CompiledRule]) -> None:
    counts = Counter(r.id for r in rules)
    duplicates = [rid for rid, n in counts.items() if n > 1]
    if duplicates:
        raise DuplicateRuleIdError(duplicates)


class RuleApplier:
    """Replace everything installed in a rule store with a freshly compiled set."""

    def __init__(self, store: RuleStore):
        self.logger = setup_logging()
        self.store = store

    async def apply(self, rules: Iterable[CompiledRule]) -> ApplyResult:
        unique, skipped = dedupe_rules(rules)
        for rule_id in skipped:
            self.logger.warn(f"skipping duplicate rule ID {rule_id}")

        assert_unique_ids(unique)

        remove_ids = await self.store.get_current_rule_ids()

        try:
            await self.store.replace_rules(remove_ids=remove_ids, add_rules=unique)
        except Exception as e:
            self.logger.error(f"failed to apply rules: {e}")
            raise

        self.logger.info(f"applied {len(unique)} rule(s), removed {len(remove_ids)} old rule(s)")
        return ApplyResult(applied=len(unique), removed=len(remove_ids), skipped_ids=tuple(skipped))
