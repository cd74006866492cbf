from typing import Any, Dict, List, Optional, Sequence, Set

from mitmproxy import http

from ..utils import setup_logging
from .models import CompiledRule, HeaderOperation
from .store import DynamicRuleStore

# Sec-Fetch-Dest values mapped onto the engine's resource types
_FETCH_DEST_TYPES = {
    "document": "main_frame",
    "iframe": "sub_frame",
    "frame": "sub_frame",
    "fencedframe": "sub_frame",
    "empty": "xmlhttprequest",
    "script": "script",
    "worker": "script",
    "sharedworker": "script",
    "serviceworker": "script",
    "audioworklet": "script",
    "paintworklet": "script",
    "image": "image",
    "style": "stylesheet",
    "object": "object",
    "embed": "object",
    "font": "font",
    "audio": "media",
    "video": "media",
    "track": "media",
    "report": "csp_report",
    "webbundle": "webbundle",
}

MATCHED_RULES_KEY = "_chheader_matched_rules"
HITS_KEY = "_chheader_hits"


def resource_type_of(flow: http.HTTPFlow) -> str:
    headers = flow.request.headers
    if headers.get("Upgrade", "").lower() == "websocket":
        return "websocket"
    if headers.get("Ping-To") or headers.get("Ping-From"):
        return "ping"
    dest = (headers.get("Sec-Fetch-Dest") or "").lower()
    return _FETCH_DEST_TYPES.get(dest, "other")


class HeaderRuleEngine:
    """Enforces the rules installed in a DynamicRuleStore on live flows.

    Matching happens once, in the request phase; the matched rules are kept
    on the flow so the response phase applies the same rule set even if the
    store is replaced in between.
    """

    def __init__(self, store: DynamicRuleStore):
        self.logger = setup_logging()
        self.store = store

    def handle_request(self, flow: http.HTTPFlow) -> None:
        url = flow.request.pretty_url
        matched = self.store.matching_rules(url, resource_type_of(flow))
        if not matched:
            return

        flow.metadata[MATCHED_RULES_KEY] = matched
        for rule in matched:
            self.record_hit(flow, rule)

        self.apply_header_operations(flow.request, [r.action.request_headers or () for r in matched], "request")

    def handle_response(self, flow: http.HTTPFlow) -> None:
        matched: List[CompiledRule] = flow.metadata.get(MATCHED_RULES_KEY, [])
        if not matched or not flow.response:
            return
        self.apply_header_operations(flow.response, [r.action.response_headers or () for r in matched], "response")

    def apply_header_operations(self, message: Any, per_rule_ops: Sequence[Sequence[HeaderOperation]], phase: str) -> int:
        """Apply header operations rule by rule; the first rule to touch a header wins."""
        touched: Set[str] = set()
        count = 0
        for ops in per_rule_ops:
            claimed: Set[str] = set()
            for op in ops:
                key = op.header.lower()
                if key in touched:
                    continue
                if op.operation == "set":
                    message.headers[op.header] = op.value
                elif op.operation == "append":
                    existing = message.headers.get(op.header)
                    message.headers[op.header] = f"{existing}, {op.value}" if existing else op.value
                elif op.operation == "remove":
                    if op.header in message.headers:
                        del message.headers[op.header]
                else:
                    continue
                claimed.add(key)
                count += 1
                self.logger.debug(f"{phase} header {op.operation} {op.header}")
            touched |= claimed

        if count:
            self.logger.debug(f"applied {count} header operation(s) to {phase}")
        return count

    def record_hit(self, flow: http.HTTPFlow, rule: CompiledRule) -> None:
        hits: List[Dict[str, Optional[int]]] = flow.metadata.setdefault(HITS_KEY, [])
        if any(h.get("id") == rule.id for h in hits):
            return
        hits.append({"id": rule.id, "priority": rule.priority})
