"""フラグ評価エンジン

評価は (flag, override, user id, role, effective plan) のみに依存する純粋関数で、
I/O や共有状態を持たない。任意のスレッド・タスクから同時に呼び出してよい。
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .hashing import rollout_bucket
from .models import EvaluationReason, EvaluationResult, FeatureFlag, User
from .plans import meets_plan


def _clamp_percentage(percentage: int) -> int:
    return max(0, min(100, percentage))


def evaluate(
    flag: FeatureFlag,
    overrides: Mapping[int, bool],
    user: User,
    effective_plan: str,
) -> EvaluationResult:
    """1 フラグを 1 ユーザーについて評価する。

    判定順:
        1. ユーザーオーバーライド（無効化・プラン・ロールアウトを全て無視）
        2. グローバルスイッチ
        3. ロール許可リスト（プランゲートとロールアウトを無視）
        4. プランゲート
        5. ロールアウト率（flag key + user id のハッシュ）

    Args:
        flag: 評価するフラグ
        overrides: 対象ユーザーの {flag_id: enabled}
        user: 評価対象ユーザー
        effective_plan: 外部で解決済みのプラン名

    Returns:
        評価結果。例外は送出しない。
    """
    forced = overrides.get(flag.id)
    if forced is not None:
        return EvaluationResult(
            flag_key=flag.key,
            enabled=forced,
            reason=EvaluationReason.OVERRIDE,
        )

    if not flag.enabled:
        return EvaluationResult(
            flag_key=flag.key,
            enabled=False,
            reason=EvaluationReason.FLAG_DISABLED,
        )

    if flag.allowed_roles and user.role in flag.allowed_roles:
        return EvaluationResult(
            flag_key=flag.key,
            enabled=True,
            reason=EvaluationReason.ROLE_ALLOWED,
        )

    if not meets_plan(effective_plan, flag.min_plan):
        return EvaluationResult(
            flag_key=flag.key,
            enabled=False,
            gated_by_plan=True,
            required_plan=flag.min_plan,
            reason=EvaluationReason.PLAN_GATED,
        )

    enabled, reason = _evaluate_rollout(flag, user.id)
    return EvaluationResult(flag_key=flag.key, enabled=enabled, reason=reason)


def _evaluate_rollout(flag: FeatureFlag, user_id: int) -> tuple[bool, EvaluationReason]:
    percentage = _clamp_percentage(flag.rollout_percentage)
    if percentage >= 100:
        return True, EvaluationReason.ROLLOUT_FULL
    if percentage <= 0:
        return False, EvaluationReason.ROLLOUT_NONE
    if rollout_bucket(flag.key, user_id) < percentage:
        return True, EvaluationReason.ROLLOUT_INCLUDED
    return False, EvaluationReason.ROLLOUT_EXCLUDED


def is_enabled_for_user(
    flag: FeatureFlag,
    user: User,
    effective_plan: str = "",
) -> bool:
    """オーバーライドなしでフラグが有効か判定する。"""
    return evaluate(flag, {}, user, effective_plan).enabled


def evaluate_all(
    flags: Iterable[FeatureFlag],
    overrides: Mapping[int, bool],
    user: User,
    effective_plan: str,
) -> dict[str, EvaluationResult]:
    """全フラグを評価して {flag_key: EvaluationResult} をキー順で返す。"""
    results = {flag.key: evaluate(flag, overrides, user, effective_plan) for flag in flags}
    return {key: results[key] for key in sorted(results)}


def enabled_map(
    flags: Iterable[FeatureFlag],
    overrides: Mapping[int, bool],
    user: User,
    effective_plan: str,
) -> dict[str, bool]:
    """全フラグを評価して {flag_key: enabled} をキー順で返す。"""
    return {
        key: result.enabled
        for key, result in evaluate_all(flags, overrides, user, effective_plan).items()
    }
