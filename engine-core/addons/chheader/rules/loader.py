import os
import time
from pathlib import Path
from typing import Optional

import yaml

from ..errors import ProfileFormatError
from ..utils import setup_logging
from .matcher import MatcherFormat, detect_format
from .models import Profile, ProfileSet

DEFAULT_PROFILES_FILE = Path.home() / ".chheader" / "profiles.yaml"


class ProfileLoader:
    """Reads the profile document written by the editing surface.

    The file is YAML (a JSON document parses too). Reloads are throttled to
    one disk check per second and only re-parse when the mtime moves. A file
    that fails to parse keeps the last good profile set.
    """

    def __init__(self, profiles_file: Optional[Path] = None, check_interval: float = 1.0):
        self.logger = setup_logging()

        env_path = os.environ.get("CHHEADER_PROFILES_FILE")
        if profiles_file is not None:
            self.profiles_file = Path(profiles_file)
        elif env_path:
            self.profiles_file = Path(env_path)
        else:
            self.profiles_file = DEFAULT_PROFILES_FILE

        self.check_interval = check_interval
        self.profile_set = ProfileSet()
        self._last_load_mtime: Optional[float] = None
        self._last_check_time: Optional[float] = None
        self.logger.info(f"ProfileLoader initialized. File: {self.profiles_file}")

    @property
    def active_profile(self) -> Optional[Profile]:
        return self.profile_set.active

    def load_profiles(self, force: bool = False) -> bool:
        """Reload the profile document if it changed. Returns True when it did."""
        now = time.monotonic()
        if not force and self._last_check_time is not None and now - self._last_check_time < self.check_interval:
            return False
        self._last_check_time = now

        mtime: Optional[float] = None
        try:
            if not self.profiles_file.exists():
                if self._last_load_mtime is None and not force:
                    return False
                changed = bool(self.profile_set.profiles) or force
                self.profile_set = ProfileSet()
                self._last_load_mtime = None
                return changed

            mtime = self.profiles_file.stat().st_mtime
            if not force and mtime == self._last_load_mtime:
                return False

            with open(self.profiles_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            profile_set = ProfileSet.from_dict(data)
            self._warn_unsupported_filters(profile_set)
        except (OSError, yaml.YAMLError, ProfileFormatError) as e:
            self.logger.warn(f"Failed to load profiles from {self.profiles_file}: {e}")
            # Report each broken version once; the next edit retries
            if mtime is not None:
                self._last_load_mtime = mtime
            return False

        self._last_load_mtime = mtime
        self.profile_set = profile_set
        active = profile_set.active
        self.logger.info(
            f"Loaded {len(profile_set.profiles)} profile(s), active: {active.name or active.id if active else 'none'}"
        )
        return True

    def _warn_unsupported_filters(self, profile_set: ProfileSet) -> None:
        for profile in profile_set.profiles:
            for m in profile.matchers:
                if detect_format(m.url_filter) == MatcherFormat.REGEX:
                    self.logger.warn(
                        f"Profile '{profile.name or profile.id}' matcher {m.id}: regex filters are installed "
                        f"verbatim and are not understood by the rule engine ({m.url_filter})"
                    )
