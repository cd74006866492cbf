import asyncio
import os
from typing import Optional, Set

from mitmproxy import command, http

from .rules.applier import ApplyResult, RuleApplier
from .rules.builder import build_rules_from_profile
from .rules.engine import HeaderRuleEngine
from .rules.loader import ProfileLoader
from .rules.store import DEFAULT_MAX_RULES, DynamicRuleStore
from .utils import ChHeaderLogger, setup_logging


class CoreAddon:
    """Keeps the installed header rules in step with the active profile.

    On start, and whenever the profile document changes, the active profile
    is compiled and the rule store is replaced with the result. Every flow
    then goes through the header rule engine.
    """

    def __init__(self, store: Optional[DynamicRuleStore] = None, loader: Optional[ProfileLoader] = None):
        self.logger: ChHeaderLogger = setup_logging()
        if store is None:
            store = DynamicRuleStore(max_rules=int(os.environ.get("CHHEADER_MAX_RULES", DEFAULT_MAX_RULES)))
        self.store = store
        self.loader = loader or ProfileLoader()
        self.applier = RuleApplier(self.store)
        self.rule_engine = HeaderRuleEngine(self.store)
        self._pending: Set["asyncio.Task[ApplyResult]"] = set()

    async def running(self) -> None:
        """Called when the proxy is up. Install rules for whatever is active now."""
        try:
            self.loader.load_profiles(force=True)
            await self.apply_active_profile()
        except Exception as e:
            self.logger.error(f"Initial rule apply failed: {e}")

    async def apply_active_profile(self) -> ApplyResult:
        active = self.loader.active_profile
        rules = build_rules_from_profile(active)
        result = await self.applier.apply(rules)
        self.logger.info(f"applied profile {active.name or active.id if active else None}")
        return result

    async def sync(self) -> Optional[ApplyResult]:
        """Re-apply if the profile document changed since the last look."""
        if not self.loader.load_profiles():
            return None
        return await self.apply_active_profile()

    @command.command("chheader.apply")
    def apply_now(self) -> None:
        """Reload profiles and re-apply the active profile immediately."""
        self.loader.load_profiles(force=True)
        task = asyncio.get_running_loop().create_task(self.apply_active_profile())
        self._pending.add(task)
        task.add_done_callback(self._on_apply_done)

    def _on_apply_done(self, task: "asyncio.Task[ApplyResult]") -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(f"chheader.apply failed: {task.exception()}")

    async def request(self, flow: http.HTTPFlow) -> None:
        try:
            await self.sync()
        except Exception as e:
            self.logger.error(f"Failed to refresh rules: {e}")

        try:
            self.rule_engine.handle_request(flow)
        except Exception as e:
            self.logger.error(f"Critical error in CoreAddon.request: {e}")

    async def response(self, flow: http.HTTPFlow) -> None:
        try:
            self.rule_engine.handle_response(flow)
        except Exception as e:
            self.logger.error(f"Critical error in CoreAddon.response: {e}")
