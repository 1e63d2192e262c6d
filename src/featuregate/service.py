"""FeatureFlagService: 管理用書き込みパスとユーザー評価パス"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from .cache import EvaluationCache
from .engine import evaluate_all
from .exceptions import ValidationError
from .logger import DEFAULT_LOGGER_NAME
from .metrics import evaluation_cache_hits_total, evaluations_total
from .models import (
    CreateFeatureFlagRequest,
    EvaluationResult,
    FeatureFlag,
    UpdateFeatureFlagRequest,
    User,
)
from .store import FlagStore
from .validation import validate_create_request, validate_update_request, validate_user_id


class FeatureFlagService:
    """フラグストアと評価エンジンを束ねるサービス。

    書き込みは検証 → 永続化 → キャッシュ無効化の順に行う。
    評価自体は engine の純粋関数に委譲し、サービスは入力の読み込みのみを担う。
    """

    def __init__(
        self,
        store: FlagStore,
        cache: EvaluationCache | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._store = store
        self._cache = cache
        self._logger = logger or structlog.stdlib.get_logger(DEFAULT_LOGGER_NAME)

    async def list_flags(self) -> list[FeatureFlag]:
        """全フラグをキー順で返す。"""
        return await self._store.list_flags()

    async def get_flag(self, key: str) -> FeatureFlag:
        return await self._store.get_flag(key)

    async def create_flag(self, req: CreateFeatureFlagRequest) -> FeatureFlag:
        """フラグを作成する。

        Raises:
            ValidationError: キー・ロールアウト率・最小プランが不正な場合
            FeatureFlagError: キーが重複している場合 (FLAG_ALREADY_EXISTS)
        """
        self._validate(validate_create_request, req, key=req.key)
        flag = await self._store.create_flag(
            FeatureFlag(
                key=req.key,
                name=req.name,
                description=req.description,
                enabled=req.enabled,
                rollout_percentage=req.rollout_percentage,
                allowed_roles=list(req.allowed_roles),
                min_plan=req.min_plan,
            )
        )
        self._logger.info("feature_flag_created", key=flag.key, flag_id=flag.id)
        await self._invalidate_all()
        return flag

    async def update_flag(self, key: str, req: UpdateFeatureFlagRequest) -> FeatureFlag:
        """フラグを部分更新する。キーは変更できない。"""
        flag = await self._store.get_flag(key)
        self._validate(validate_update_request, req, key=key)

        if req.name is not None:
            flag.name = req.name
        if req.description is not None:
            flag.description = req.description
        if req.enabled is not None:
            flag.enabled = req.enabled
        if req.rollout_percentage is not None:
            flag.rollout_percentage = req.rollout_percentage
        if req.allowed_roles is not None:
            flag.allowed_roles = list(req.allowed_roles)
        if req.min_plan is not None:
            flag.min_plan = req.min_plan

        saved = await self._store.save_flag(flag)
        self._logger.info("feature_flag_updated", key=saved.key, flag_id=saved.id)
        await self._invalidate_all()
        return saved

    async def delete_flag(self, key: str) -> None:
        """フラグとそのオーバーライドを削除する。"""
        await self._store.delete_flag(key)
        self._logger.info("feature_flag_deleted", key=key)
        await self._invalidate_all()

    async def set_user_override(self, user_id: int, key: str, enabled: bool) -> None:
        """ユーザーオーバーライドを設定する (upsert)。"""
        validate_user_id(user_id)
        flag = await self._store.get_flag(key)
        await self._store.upsert_override(flag.id, user_id, enabled)
        self._logger.info("override_set", key=key, user_id=user_id, enabled=enabled)
        await self._invalidate_user(user_id)

    async def delete_user_override(self, user_id: int, key: str) -> bool:
        """ユーザーオーバーライドを削除し、通常評価に戻す。"""
        validate_user_id(user_id)
        flag = await self._store.get_flag(key)
        deleted = await self._store.delete_override(flag.id, user_id)
        self._logger.info("override_deleted", key=key, user_id=user_id, deleted=deleted)
        await self._invalidate_user(user_id)
        return deleted

    async def evaluate_for_user(
        self, user: User, effective_plan: str = ""
    ) -> dict[str, EvaluationResult]:
        """全フラグをユーザーについて評価し {flag_key: EvaluationResult} を返す。"""
        generation = 0
        if self._cache is not None:
            cached = await self._cache.get(user, effective_plan)
            if cached is not None:
                evaluation_cache_hits_total.add(1)
                return cached
            generation = await self._cache.generation(user.id)

        flags = await self._store.list_flags()
        overrides = await self._store.get_overrides_for_user(user.id)
        results = evaluate_all(flags, overrides, user, effective_plan)
        for result in results.values():
            evaluations_total.add(1, {"reason": result.reason.value})

        if self._cache is not None:
            stored = await self._cache.set(user, effective_plan, results, generation)
            if not stored:
                self._logger.debug("evaluation_cache_store_skipped", user_id=user.id)
        return results

    async def flags_for_user(self, user: User, effective_plan: str = "") -> dict[str, bool]:
        """全フラグの {flag_key: enabled} を返す。"""
        results = await self.evaluate_for_user(user, effective_plan)
        return {key: result.enabled for key, result in results.items()}

    async def is_enabled(self, key: str, user: User, effective_plan: str = "") -> bool:
        """単一フラグの有効判定。未知のキーは False。"""
        results = await self.evaluate_for_user(user, effective_plan)
        result = results.get(key)
        return result.enabled if result is not None else False

    def _validate(self, rule: Callable[[Any], None], req: object, *, key: str) -> None:
        try:
            rule(req)
        except ValidationError as e:
            self._logger.warning(
                "feature_flag_write_rejected", key=key, field=e.field, code=e.code
            )
            raise

    async def _invalidate_all(self) -> None:
        if self._cache is None:
            return
        count = await self._cache.invalidate_all()
        self._logger.debug("evaluation_cache_invalidated", scope="all", entries=count)

    async def _invalidate_user(self, user_id: int) -> None:
        if self._cache is None:
            return
        count = await self._cache.invalidate_user(user_id)
        self._logger.debug(
            "evaluation_cache_invalidated", scope="user", user_id=user_id, entries=count
        )
