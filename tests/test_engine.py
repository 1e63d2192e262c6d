"""評価エンジンのユニットテスト"""

import pytest
from featuregate import (
    EvaluationReason,
    FeatureFlag,
    User,
    enabled_map,
    evaluate,
    evaluate_all,
    is_enabled_for_user,
    rollout_bucket,
)


def make_flag(
    key: str = "test_flag",
    *,
    id: int = 1,
    enabled: bool = True,
    rollout_percentage: int = 100,
    allowed_roles: list[str] | None = None,
    min_plan: str = "",
) -> FeatureFlag:
    return FeatureFlag(
        id=id,
        key=key,
        enabled=enabled,
        rollout_percentage=rollout_percentage,
        allowed_roles=allowed_roles or [],
        min_plan=min_plan,
    )


USER = User(id=1, role="user")


# --- override ---


def test_override_true_bypasses_all_checks() -> None:
    """オーバーライド true は無効フラグ・プラン・ロールアウトを無視すること。"""
    flag = make_flag(enabled=False, rollout_percentage=0, min_plan="enterprise")
    result = evaluate(flag, {1: True}, USER, "free")
    assert result.enabled is True
    assert result.gated_by_plan is False
    assert result.required_plan == ""
    assert result.reason == EvaluationReason.OVERRIDE


def test_override_false_bypasses_full_rollout() -> None:
    """オーバーライド false は 100% ロールアウトでも無効になること。"""
    flag = make_flag(rollout_percentage=100)
    result = evaluate(flag, {1: False}, USER, "enterprise")
    assert result.enabled is False
    assert result.gated_by_plan is False
    assert result.reason == EvaluationReason.OVERRIDE


def test_override_false_beats_role_allowlist() -> None:
    flag = make_flag(allowed_roles=["admin"])
    result = evaluate(flag, {1: False}, User(id=1, role="admin"), "")
    assert result.enabled is False


def test_override_for_other_flag_is_ignored() -> None:
    """他フラグのオーバーライドは影響しないこと。"""
    flag = make_flag(id=7, enabled=False)
    result = evaluate(flag, {8: True}, USER, "")
    assert result.enabled is False
    assert result.reason == EvaluationReason.FLAG_DISABLED


# --- global switch ---


def test_disabled_flag_is_never_plan_gated() -> None:
    """無効フラグはプラン要件があっても gated_by_plan にならないこと。"""
    flag = make_flag(enabled=False, min_plan="enterprise")
    result = evaluate(flag, {}, USER, "free")
    assert result.enabled is False
    assert result.gated_by_plan is False
    assert result.required_plan == ""


def test_disabled_flag_with_met_plan() -> None:
    flag = make_flag(enabled=False, min_plan="free")
    assert evaluate(flag, {}, USER, "enterprise").enabled is False


# --- role allowlist ---


def test_role_allowed_bypasses_zero_rollout() -> None:
    flag = make_flag(rollout_percentage=0, allowed_roles=["admin", "premium"])
    result = evaluate(flag, {}, User(id=1, role="admin"), "")
    assert result.enabled is True
    assert result.reason == EvaluationReason.ROLE_ALLOWED


def test_role_allowed_bypasses_plan_gate() -> None:
    """ロール許可はプランゲートより優先されること。"""
    flag = make_flag(allowed_roles=["admin"], min_plan="enterprise")
    result = evaluate(flag, {}, User(id=1, role="admin"), "free")
    assert result.enabled is True
    assert result.gated_by_plan is False
    assert result.required_plan == ""


def test_role_not_allowed_falls_through_to_rollout() -> None:
    flag = make_flag(rollout_percentage=0, allowed_roles=["admin"])
    result = evaluate(flag, {}, USER, "")
    assert result.enabled is False
    assert result.reason == EvaluationReason.ROLLOUT_NONE


# --- plan gate ---


@pytest.mark.parametrize(
    ("min_plan", "effective_plan", "gated"),
    [
        ("pro", "free", True),
        ("pro", "", True),
        ("enterprise", "pro", True),
        ("pro", "pro", False),
        ("pro", "enterprise", False),
        ("free", "free", False),
        ("", "", False),
    ],
)
def test_plan_gate(min_plan: str, effective_plan: str, gated: bool) -> None:
    flag = make_flag(min_plan=min_plan)
    result = evaluate(flag, {}, USER, effective_plan)
    assert result.gated_by_plan is gated
    assert result.enabled is (not gated)
    assert result.required_plan == (min_plan if gated else "")


def test_plan_gate_takes_precedence_over_rollout() -> None:
    """0% ロールアウトでもプラン未達ならゲート理由が返ること。"""
    flag = make_flag(rollout_percentage=0, min_plan="pro")
    result = evaluate(flag, {}, USER, "free")
    assert result.gated_by_plan is True
    assert result.reason == EvaluationReason.PLAN_GATED


def test_unknown_effective_plan_ranks_as_no_plan() -> None:
    flag = make_flag(min_plan="free")
    assert evaluate(flag, {}, USER, "platinum").gated_by_plan is True


# --- rollout ---


def test_full_rollout_enables_every_user() -> None:
    flag = make_flag(rollout_percentage=100)
    assert all(is_enabled_for_user(flag, User(id=uid)) for uid in range(1, 501))


def test_zero_rollout_disables_every_user() -> None:
    flag = make_flag(rollout_percentage=0)
    assert not any(is_enabled_for_user(flag, User(id=uid)) for uid in range(1, 501))


def test_partial_rollout_matches_bucket() -> None:
    flag = make_flag(key="test_feature", rollout_percentage=30)
    for uid in range(1, 200):
        expected = rollout_bucket("test_feature", uid) < 30
        assert is_enabled_for_user(flag, User(id=uid)) is expected


def test_out_of_range_percentage_is_clamped() -> None:
    """範囲外のロールアウト率は例外にならずクランプされること。"""
    over = make_flag(rollout_percentage=250)
    under = make_flag(rollout_percentage=-5)
    assert evaluate(over, {}, USER, "").reason == EvaluationReason.ROLLOUT_FULL
    assert evaluate(under, {}, USER, "").reason == EvaluationReason.ROLLOUT_NONE


def test_rollout_is_deterministic() -> None:
    flag = make_flag(key="test_feature", rollout_percentage=50)
    for uid in range(1, 101):
        user = User(id=uid)
        assert evaluate(flag, {}, user, "") == evaluate(flag, {}, user, "")


def test_rollout_is_monotonic_in_percentage() -> None:
    """ロールアウト率を上げても既存の有効ユーザーは外れないこと。"""
    users = [User(id=uid) for uid in range(1, 1001)]
    previous: set[int] = set()
    for percentage in range(0, 101, 5):
        flag = make_flag(key="gradual_launch", rollout_percentage=percentage)
        current = {u.id for u in users if is_enabled_for_user(flag, u)}
        assert previous <= current
        previous = current
    assert len(previous) == len(users)


def test_rollout_converges_to_percentage() -> None:
    flag = make_flag(key="test_feature", rollout_percentage=50)
    enabled = sum(is_enabled_for_user(flag, User(id=uid)) for uid in range(1, 10001))
    assert 0.45 <= enabled / 10000 <= 0.55


def test_evaluate_does_not_mutate_inputs() -> None:
    flag = make_flag(allowed_roles=["admin"], min_plan="pro")
    overrides = {2: True}
    before = (flag.key, list(flag.allowed_roles), flag.min_plan, dict(overrides))
    evaluate(flag, overrides, USER, "free")
    assert before == (flag.key, list(flag.allowed_roles), flag.min_plan, dict(overrides))


# --- end-to-end scenario ---


def test_pro_feature_for_free_and_enterprise_users() -> None:
    flag = make_flag(key="pro_feature", id=2, rollout_percentage=100, min_plan="pro")

    free = evaluate(flag, {}, USER, "free")
    assert (free.enabled, free.gated_by_plan, free.required_plan) == (False, True, "pro")

    enterprise = evaluate(flag, {}, USER, "enterprise")
    assert (enterprise.enabled, enterprise.gated_by_plan, enterprise.required_plan) == (
        True,
        False,
        "",
    )


# --- bulk ---


def test_evaluate_all_is_sorted_by_key() -> None:
    flags = [
        make_flag("zeta", id=1),
        make_flag("alpha", id=2, enabled=False),
        make_flag("mid", id=3, min_plan="pro"),
    ]
    results = evaluate_all(flags, {2: True}, USER, "free")
    assert list(results) == ["alpha", "mid", "zeta"]
    assert results["alpha"].enabled is True
    assert results["mid"].gated_by_plan is True
    assert results["zeta"].enabled is True


def test_enabled_map() -> None:
    flags = [make_flag("b_flag", id=1), make_flag("a_flag", id=2, enabled=False)]
    assert enabled_map(flags, {}, USER, "") == {"a_flag": False, "b_flag": True}


def test_evaluate_all_empty() -> None:
    assert evaluate_all([], {}, USER, "") == {}
