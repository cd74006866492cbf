"""Value types shared by the matcher, builder, applier and store.

Profiles arrive from storage as plain dicts with camelCase keys (the same
shape the popup writes). ``Profile.from_dict`` is the single boundary where
that shape is normalized: missing lists become empty tuples and an empty
``urlFilter`` becomes ``"*"``. Everything past that point works on frozen
dataclasses.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..errors import ProfileFormatError

MATCH_ALL_FILTER = "*"
UPSERT = "set"
MODIFY_HEADERS = "modifyHeaders"

# Types accepted by the declarative engine for condition.resourceTypes
RESOURCE_TYPES = frozenset({
    "csp_report",
    "document",
    "font",
    "image",
    "main_frame",
    "media",
    "object",
    "other",
    "ping",
    "script",
    "stylesheet",
    "sub_frame",
    "webbundle",
    "websocket",
    "webtransport",
    "xmlhttprequest",
})

# Older spelling of a top-level navigation, matched as main_frame
RESOURCE_TYPE_ALIASES: Dict[str, str] = {"document": "main_frame"}

# Substituted for an empty resource type restriction
DEFAULT_RESOURCE_TYPES: Tuple[str, ...] = (
    "main_frame",
    "sub_frame",
    "xmlhttprequest",
    "script",
    "image",
    "stylesheet",
    "object",
    "ping",
    "other",
)


def _list_field(data: Dict[str, Any], key: str, owner: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ProfileFormatError(f"{owner} '{key}' must be a list, got {type(value).__name__}")
    return value


def _mapping(data: Any, owner: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ProfileFormatError(f"{owner} must be a mapping, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class Matcher:
    id: str
    url_filter: str = MATCH_ALL_FILTER
    resource_types: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Matcher":
        data = _mapping(data, "Matcher")
        url_filter = data.get("urlFilter")
        return cls(
            id=str(data.get("id", "")),
            url_filter=str(url_filter if url_filter is not None else "") or MATCH_ALL_FILTER,
            resource_types=tuple(str(t) for t in _list_field(data, "resourceTypes", "Matcher")),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id, "urlFilter": self.url_filter}
        if self.resource_types:
            d["resourceTypes"] = list(self.resource_types)
        return d


@dataclass(frozen=True)
class HeaderEdit:
    id: str
    header: str
    value: str = ""
    enabled: bool = True

    @property
    def is_active(self) -> bool:
        return self.enabled is not False and bool(self.header and self.header.strip())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeaderEdit":
        data = _mapping(data, "Header edit")
        enabled = data.get("enabled")
        value = data.get("value")
        return cls(
            id=str(data.get("id", "")),
            header=str(data.get("header") or ""),
            value=str(value) if value is not None else "",
            enabled=enabled is not False,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "header": self.header, "value": self.value, "enabled": self.enabled}


@dataclass(frozen=True)
class Profile:
    id: str
    enabled: bool = False
    matchers: Tuple[Matcher, ...] = ()
    request_headers: Tuple[HeaderEdit, ...] = ()
    response_headers: Tuple[HeaderEdit, ...] = ()
    name: str = ""
    color: str = ""
    notes: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        data = _mapping(data, "Profile")
        profile_id = data.get("id")
        if not profile_id:
            raise ProfileFormatError(f"Profile is missing an id: {data.get('name', '<unnamed>')}")
        return cls(
            id=str(profile_id),
            enabled=bool(data.get("enabled", False)),
            matchers=tuple(Matcher.from_dict(m) for m in _list_field(data, "matchers", "Profile")),
            request_headers=tuple(HeaderEdit.from_dict(h) for h in _list_field(data, "requestHeaders", "Profile")),
            response_headers=tuple(HeaderEdit.from_dict(h) for h in _list_field(data, "responseHeaders", "Profile")),
            name=str(data.get("name") or ""),
            color=str(data.get("color") or ""),
            notes=str(data.get("notes") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "notes": self.notes,
            "enabled": self.enabled,
            "matchers": [m.to_dict() for m in self.matchers],
            "requestHeaders": [h.to_dict() for h in self.request_headers],
            "responseHeaders": [h.to_dict() for h in self.response_headers],
        }


@dataclass(frozen=True)
class HeaderOperation:
    header: str
    value: str
    operation: str = UPSERT

    def to_dict(self) -> Dict[str, str]:
        return {"header": self.header, "operation": self.operation, "value": self.value}


@dataclass(frozen=True)
class RuleCondition:
    url_filter: str
    resource_types: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"urlFilter": self.url_filter, "resourceTypes": list(self.resource_types)}


@dataclass(frozen=True)
class RuleAction:
    """A modifyHeaders action. A side with no operations is None, never empty."""
    request_headers: Optional[Tuple[HeaderOperation, ...]] = None
    response_headers: Optional[Tuple[HeaderOperation, ...]] = None
    type: str = MODIFY_HEADERS

    @classmethod
    def modify_headers(cls, request_ops: Tuple[HeaderOperation, ...],
                       response_ops: Tuple[HeaderOperation, ...]) -> "RuleAction":
        return cls(
            request_headers=tuple(request_ops) or None,
            response_headers=tuple(response_ops) or None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.request_headers and not self.response_headers

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"type": self.type}
        if self.request_headers:
            d["requestHeaders"] = [op.to_dict() for op in self.request_headers]
        if self.response_headers:
            d["responseHeaders"] = [op.to_dict() for op in self.response_headers]
        return d


@dataclass(frozen=True)
class CompiledRule:
    id: int
    condition: RuleCondition
    action: RuleAction
    priority: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "priority": self.priority,
            "action": self.action.to_dict(),
            "condition": self.condition.to_dict(),
        }


@dataclass(frozen=True)
class ProfileSet:
    """Snapshot of a profile document: every profile plus the active id."""
    profiles: Tuple[Profile, ...] = ()
    active_id: Optional[str] = None

    @property
    def active(self) -> Optional[Profile]:
        for p in self.profiles:
            if p.id == self.active_id and p.enabled:
                return p
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileSet":
        if not isinstance(data, dict):
            raise ProfileFormatError(f"Profile document must be a mapping, got {type(data).__name__}")
        raw: List[Any] = data.get("profiles") or []
        if not isinstance(raw, list):
            raise ProfileFormatError("'profiles' must be a list")
        return cls(
            profiles=tuple(Profile.from_dict(p) for p in raw),
            active_id=data.get("activeProfileId") or None,
        )
