"""評価結果キャッシュ"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from .models import EvaluationResult, User

DEFAULT_TTL_SECONDS = 300.0

_CacheKey = tuple[int, str, str]


def cache_key(user: User, effective_plan: str) -> _CacheKey:
    """評価入力のうちユーザー側の要素からキャッシュキーを作る。"""
    return (user.id, user.role, effective_plan)


class EvaluationCache(ABC):
    """ユーザー単位の評価結果キャッシュ抽象基底クラス。

    無効化のたびに世代番号が進む。評価前に取得した世代と保存時の世代が
    異なる場合、その結果は書き込みより前の入力に基づくため保存しない。
    """

    @abstractmethod
    async def get(self, user: User, effective_plan: str) -> dict[str, EvaluationResult] | None:
        """キャッシュ済みの評価結果を取得する。存在しなければ None。"""
        ...

    @abstractmethod
    async def generation(self, user_id: int) -> int:
        """指定ユーザーに対する現在の世代番号を返す。"""
        ...

    @abstractmethod
    async def set(
        self,
        user: User,
        effective_plan: str,
        results: dict[str, EvaluationResult],
        generation: int,
    ) -> bool:
        """世代が変わっていなければ評価結果を保存する。保存できたら True。"""
        ...

    @abstractmethod
    async def invalidate_user(self, user_id: int) -> int:
        """指定ユーザーのエントリを削除し、削除件数を返す。"""
        ...

    @abstractmethod
    async def invalidate_all(self) -> int:
        """全エントリを削除し、削除件数を返す。"""
        ...


class _CacheEntry:
    __slots__ = ("results", "expires_at")

    def __init__(self, results: dict[str, EvaluationResult], ttl: float) -> None:
        self.results = results
        self.expires_at = time.monotonic() + ttl

    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at


class InMemoryEvaluationCache(EvaluationCache):
    """インメモリ評価結果キャッシュ。"""

    def __init__(self, ttl: float = DEFAULT_TTL_SECONDS) -> None:
        self._ttl = ttl
        self._store: dict[_CacheKey, _CacheEntry] = {}
        self._global_generation = 0
        self._user_generations: dict[int, int] = {}

    async def get(self, user: User, effective_plan: str) -> dict[str, EvaluationResult] | None:
        key = cache_key(user, effective_plan)
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del self._store[key]
            return None
        return dict(entry.results)

    async def generation(self, user_id: int) -> int:
        # both counters only increase, so the sum changes whenever either does
        return self._global_generation + self._user_generations.get(user_id, 0)

    async def set(
        self,
        user: User,
        effective_plan: str,
        results: dict[str, EvaluationResult],
        generation: int,
    ) -> bool:
        if generation != await self.generation(user.id):
            return False
        self._store[cache_key(user, effective_plan)] = _CacheEntry(dict(results), self._ttl)
        return True

    async def invalidate_user(self, user_id: int) -> int:
        self._user_generations[user_id] = self._user_generations.get(user_id, 0) + 1
        keys = [key for key in self._store if key[0] == user_id]
        for key in keys:
            del self._store[key]
        return len(keys)

    async def invalidate_all(self) -> int:
        self._global_generation += 1
        count = len(self._store)
        self._store.clear()
        return count
