"""InMemoryFlagStore 実装"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .models import FeatureFlag, UserOverride
from .store import FlagStore


def _copy(flag: FeatureFlag) -> FeatureFlag:
    return replace(flag, allowed_roles=list(flag.allowed_roles))


class InMemoryFlagStore(FlagStore):
    """テスト用インメモリフラグストア。"""

    def __init__(self) -> None:
        self._flags: dict[str, FeatureFlag] = {}
        self._overrides: dict[tuple[int, int], UserOverride] = {}
        self._next_id = 1

    async def list_flags(self) -> list[FeatureFlag]:
        return [_copy(self._flags[key]) for key in sorted(self._flags)]

    async def get_flag(self, key: str) -> FeatureFlag:
        flag = self._flags.get(key)
        if flag is None:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.FLAG_NOT_FOUND,
                f"Feature flag not found: {key}",
            )
        return _copy(flag)

    async def create_flag(self, flag: FeatureFlag) -> FeatureFlag:
        if flag.key in self._flags:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.FLAG_ALREADY_EXISTS,
                f"Feature flag with this key already exists: {flag.key}",
            )
        now = datetime.now(timezone.utc)
        stored = replace(
            flag,
            id=self._next_id,
            allowed_roles=list(flag.allowed_roles),
            created_at=now,
            updated_at=now,
        )
        self._next_id += 1
        self._flags[stored.key] = stored
        return _copy(stored)

    async def save_flag(self, flag: FeatureFlag) -> FeatureFlag:
        existing = self._flags.get(flag.key)
        if existing is None or existing.id != flag.id:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.FLAG_NOT_FOUND,
                f"Feature flag not found: {flag.key}",
            )
        stored = replace(
            flag,
            allowed_roles=list(flag.allowed_roles),
            created_at=existing.created_at,
            updated_at=datetime.now(timezone.utc),
        )
        self._flags[stored.key] = stored
        return _copy(stored)

    async def delete_flag(self, key: str) -> None:
        flag = self._flags.pop(key, None)
        if flag is None:
            raise FeatureFlagError(
                FeatureFlagErrorCodes.FLAG_NOT_FOUND,
                f"Feature flag not found: {key}",
            )
        for pair in [p for p in self._overrides if p[0] == flag.id]:
            del self._overrides[pair]

    async def get_overrides_for_user(self, user_id: int) -> dict[int, bool]:
        return {
            override.flag_id: override.enabled
            for override in self._overrides.values()
            if override.user_id == user_id
        }

    async def upsert_override(self, flag_id: int, user_id: int, enabled: bool) -> None:
        existing = self._overrides.get((flag_id, user_id))
        if existing is not None:
            existing.enabled = enabled
            existing.updated_at = datetime.now(timezone.utc)
            return
        self._overrides[(flag_id, user_id)] = UserOverride(
            flag_id=flag_id, user_id=user_id, enabled=enabled
        )

    async def delete_override(self, flag_id: int, user_id: int) -> bool:
        if (flag_id, user_id) in self._overrides:
            del self._overrides[(flag_id, user_id)]
            return True
        return False
