"""サブスクリプションプランの階層比較"""

from __future__ import annotations

PLAN_NONE = ""
PLAN_FREE = "free"
PLAN_PRO = "pro"
PLAN_ENTERPRISE = "enterprise"

PLAN_HIERARCHY: dict[str, int] = {
    PLAN_NONE: 0,
    PLAN_FREE: 1,
    PLAN_PRO: 2,
    PLAN_ENTERPRISE: 3,
}


def plan_rank(plan: str) -> int:
    """プランのランクを返す。未知のプランは 0 (プランなし) と同等に扱う。"""
    return PLAN_HIERARCHY.get(plan, 0)


def is_known_plan(plan: str) -> bool:
    """階層に定義されたプラン名（空文字を含む）か確認する。"""
    return plan in PLAN_HIERARCHY


def meets_plan(effective_plan: str, min_plan: str) -> bool:
    """effective_plan が min_plan 以上か確認する。min_plan が空なら常に True。"""
    if not min_plan:
        return True
    return plan_rank(effective_plan) >= plan_rank(min_plan)
