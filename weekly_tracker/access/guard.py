import json
import logging
import time
from pathlib import Path
from typing import Callable, Iterable, Optional


logger = logging.getLogger(__name__)


def check_user_access(user_email: Optional[str], owner_email: Optional[str], editors: Iterable[str] = ()) -> bool:
    """Return True if the user owns the spreadsheet or is a listed editor"""
    if not user_email:
        return False

    user_email = user_email.strip().lower()
    allowed = {email.strip().lower() for email in editors if email}
    if owner_email:
        allowed.add(owner_email.strip().lower())
    return user_email in allowed


class ButtonCooldown:
    """Rate limits button clicks per user.

    The time of the last accepted click is kept in memory, or in a JSON file
    when ``state_path`` is given so separate runs share it.
    """

    def __init__(
        self,
        delay_seconds: float,
        state_path: Optional[Path] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.delay_seconds = delay_seconds
        self.state_path = state_path
        self.clock = clock
        self._last_clicks: dict[str, float] = {}

    def _load(self) -> dict[str, float]:
        if self.state_path is None or not self.state_path.exists():
            return self._last_clicks
        with self.state_path.open(encoding="utf-8") as state_file:
            return json.load(state_file)

    def _save(self, last_clicks: dict[str, float]) -> None:
        self._last_clicks = last_clicks
        if self.state_path is not None:
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            with self.state_path.open("w", encoding="utf-8") as state_file:
                json.dump(last_clicks, state_file)

    def remaining(self, user: str) -> int:
        """Whole seconds left before the user may click again"""
        last_click = self._load().get(user, 0)
        elapsed = self.clock() - last_click
        if elapsed >= self.delay_seconds:
            return 0
        return int(self.delay_seconds - int(elapsed))

    def try_acquire(self, user: str) -> bool:
        """Record a click and return True if the cooldown has passed"""
        time_remaining = self.remaining(user)
        if time_remaining:
            logger.warning(f"Please wait {time_remaining}s before clicking again.")
            return False

        last_clicks = dict(self._load())
        last_clicks[user] = self.clock()
        self._save(last_clicks)
        return True
