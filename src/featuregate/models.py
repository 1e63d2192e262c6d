"""featuregate データモデル"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class EvaluationReason(str, Enum):
    """評価結果を決定した判定ステップ。"""

    OVERRIDE = "OVERRIDE"
    FLAG_DISABLED = "FLAG_DISABLED"
    ROLE_ALLOWED = "ROLE_ALLOWED"
    PLAN_GATED = "PLAN_GATED"
    ROLLOUT_FULL = "ROLLOUT_FULL"
    ROLLOUT_NONE = "ROLLOUT_NONE"
    ROLLOUT_INCLUDED = "ROLLOUT_INCLUDED"
    ROLLOUT_EXCLUDED = "ROLLOUT_EXCLUDED"


@dataclass
class FeatureFlag:
    """フィーチャーフラグ。"""

    key: str
    id: int = 0
    name: str = ""
    description: str = ""
    enabled: bool = False
    rollout_percentage: int = 0
    allowed_roles: list[str] = field(default_factory=list)
    min_plan: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class UserOverride:
    """ユーザー単位のフラグ強制値。(flag_id, user_id) ごとに最大 1 件。"""

    flag_id: int
    user_id: int
    enabled: bool
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class User:
    """評価対象ユーザー。"""

    id: int
    role: str = "user"


@dataclass(frozen=True)
class EvaluationResult:
    """フラグ評価結果。キャッシュ間で共有されるため不変。"""

    flag_key: str
    enabled: bool
    gated_by_plan: bool = False
    required_plan: str = ""
    reason: EvaluationReason = EvaluationReason.FLAG_DISABLED


@dataclass
class CreateFeatureFlagRequest:
    """フラグ作成リクエスト。"""

    key: str
    name: str = ""
    description: str = ""
    enabled: bool = False
    rollout_percentage: int = 0
    allowed_roles: list[str] = field(default_factory=list)
    min_plan: str = ""


@dataclass
class UpdateFeatureFlagRequest:
    """フラグ部分更新リクエスト。None のフィールドは変更しない。"""

    name: str | None = None
    description: str | None = None
    enabled: bool | None = None
    rollout_percentage: int | None = None
    allowed_roles: list[str] | None = None
    min_plan: str | None = None
