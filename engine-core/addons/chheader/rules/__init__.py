from .applier import ApplyResult, RuleApplier, dedupe_rules
from .builder import build_rules_from_profile, hash_to_int
from .engine import HeaderRuleEngine
from .loader import ProfileLoader
from .matcher import MatcherFormat, detect_format, evaluate, match_url, validate_pattern
from .models import CompiledRule, HeaderEdit, Matcher, Profile, ProfileSet
from .store import DynamicRuleStore, RuleStore

__all__ = [
    "ApplyResult",
    "CompiledRule",
    "DynamicRuleStore",
    "HeaderEdit",
    "HeaderRuleEngine",
    "Matcher",
    "MatcherFormat",
    "Profile",
    "ProfileLoader",
    "ProfileSet",
    "RuleApplier",
    "RuleStore",
    "build_rules_from_profile",
    "dedupe_rules",
    "detect_format",
    "evaluate",
    "hash_to_int",
    "match_url",
    "validate_pattern",
]
