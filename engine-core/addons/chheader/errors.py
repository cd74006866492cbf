from typing import Iterable, List


class ChHeaderError(Exception):
    """Base class for errors raised by the rule engine."""


class DuplicateRuleIdError(ChHeaderError):
    """Raised when a rule list still holds duplicate ids after deduplication."""

    def __init__(self, rule_ids: Iterable[int]):
        self.rule_ids: List[int] = sorted(set(rule_ids))
        super().__init__(f"Duplicate rule IDs detected: {', '.join(str(i) for i in self.rule_ids)}")


class RuleStoreError(ChHeaderError):
    """The rule store refused an update. The installed rule set is unchanged."""


class ProfileFormatError(ChHeaderError):
    """A profile document could not be turned into Profile values."""
