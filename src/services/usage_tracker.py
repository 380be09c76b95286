from dataclasses import dataclass, field
from typing import Protocol

import structlog

logger = structlog.get_logger()

USAGE_KEY = "gabu-usage-count"
USER_AUTH_KEY = "gabu-user-authenticated"
MAX_FREE_USES = 5


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


@dataclass
class InMemoryKeyValueStore:
    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class UsageTracker:
    def __init__(self, store: KeyValueStore, max_free_uses: int = MAX_FREE_USES) -> None:
        self._store = store
        self._max_free_uses = max_free_uses

    @property
    def max_free_uses(self) -> int:
        return self._max_free_uses

    def get_usage_count(self) -> int:
        try:
            count = self._store.get(USAGE_KEY)
            return int(count) if count else 0
        except Exception as e:
            logger.warning("usage_count_read_failed", error=str(e))
            return 0

    def increment_usage(self) -> int:
        try:
            new_count = self.get_usage_count() + 1
            self._store.set(USAGE_KEY, str(new_count))
            return new_count
        except Exception as e:
            logger.warning("usage_increment_failed", error=str(e))
            return 0

    def reset_usage(self) -> None:
        try:
            self._store.set(USAGE_KEY, "0")
        except Exception as e:
            logger.warning("usage_reset_failed", error=str(e))

    def get_remaining_uses(self) -> int:
        return max(0, self._max_free_uses - self.get_usage_count())

    def is_authenticated(self) -> bool:
        try:
            return self._store.get(USER_AUTH_KEY) == "true"
        except Exception as e:
            logger.warning("auth_flag_read_failed", error=str(e))
            return False

    def set_authenticated(self, authenticated: bool) -> None:
        try:
            self._store.set(USER_AUTH_KEY, "true" if authenticated else "false")
        except Exception as e:
            logger.warning("auth_flag_write_failed", error=str(e))

    def has_exceeded_free_uses(self) -> bool:
        if self.is_authenticated():
            return False
        return self.get_usage_count() >= self._max_free_uses

    def should_show_paywall(self) -> bool:
        return self.has_exceeded_free_uses() and not self.is_authenticated()
