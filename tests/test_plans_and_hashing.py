"""プラン階層とハッシュ関数のユニットテスト"""

from featuregate import PLAN_HIERARCHY, fnv1a_32, is_known_plan, meets_plan, plan_rank, rollout_bucket


def test_plan_hierarchy_order() -> None:
    """空文字 < free < pro < enterprise の順であること。"""
    assert plan_rank("") < plan_rank("free") < plan_rank("pro") < plan_rank("enterprise")
    assert PLAN_HIERARCHY == {"": 0, "free": 1, "pro": 2, "enterprise": 3}


def test_unknown_plan_ranks_zero() -> None:
    assert plan_rank("starter") == 0
    assert is_known_plan("starter") is False
    assert is_known_plan("") is True


def test_meets_plan() -> None:
    assert meets_plan("free", "") is True
    assert meets_plan("", "") is True
    assert meets_plan("pro", "pro") is True
    assert meets_plan("enterprise", "pro") is True
    assert meets_plan("free", "pro") is False


def test_fnv1a_32_reference_vectors() -> None:
    """FNV-1a 32bit の既知テストベクタと一致すること。"""
    assert fnv1a_32(b"") == 0x811C9DC5
    assert fnv1a_32(b"a") == 0xE40C292C
    assert fnv1a_32(b"foobar") == 0xBF9CF968


def test_rollout_bucket_hashes_key_then_decimal_user_id() -> None:
    assert rollout_bucket("test_feature", 42) == fnv1a_32(b"test_feature42") % 100


def test_rollout_bucket_range_and_stability() -> None:
    for uid in range(1, 1000):
        bucket = rollout_bucket("some_flag", uid)
        assert 0 <= bucket < 100
        assert bucket == rollout_bucket("some_flag", uid)
