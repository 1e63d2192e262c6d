"""設定型定義（pydantic BaseModel）"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .cache import DEFAULT_TTL_SECONDS
from .models import CreateFeatureFlagRequest
from .plans import is_known_plan
from .validation import is_valid_key


class LogSection(BaseModel):
    """ログ設定。"""

    level: str = "INFO"
    format: Literal["json", "text"] = "json"


class CacheSection(BaseModel):
    """評価結果キャッシュ設定。"""

    enabled: bool = True
    ttl_seconds: float = Field(default=DEFAULT_TTL_SECONDS, gt=0)


class FlagSeed(BaseModel):
    """起動時に投入するフラグ定義。"""

    key: str
    name: str = ""
    description: str = ""
    enabled: bool = False
    rollout_percentage: int = Field(default=0, ge=0, le=100)
    allowed_roles: list[str] = Field(default_factory=list)
    min_plan: str = ""

    @field_validator("key")
    @classmethod
    def _check_key(cls, value: str) -> str:
        if not is_valid_key(value):
            raise ValueError(f"invalid flag key: {value!r}")
        return value

    @field_validator("min_plan")
    @classmethod
    def _check_min_plan(cls, value: str) -> str:
        if not is_known_plan(value):
            raise ValueError(f"unknown plan: {value!r}")
        return value

    def to_request(self) -> CreateFeatureFlagRequest:
        return CreateFeatureFlagRequest(
            key=self.key,
            name=self.name,
            description=self.description,
            enabled=self.enabled,
            rollout_percentage=self.rollout_percentage,
            allowed_roles=list(self.allowed_roles),
            min_plan=self.min_plan,
        )


class FeatureGateConfig(BaseModel):
    """featuregate 設定全体。"""

    log: LogSection = Field(default_factory=LogSection)
    cache: CacheSection = Field(default_factory=CacheSection)
    flags: list[FlagSeed] = Field(default_factory=list)

    @field_validator("flags")
    @classmethod
    def _check_unique_keys(cls, value: list[FlagSeed]) -> list[FlagSeed]:
        seen: set[str] = set()
        for seed in value:
            if seed.key in seen:
                raise ValueError(f"duplicate flag key: {seed.key!r}")
            seen.add(seed.key)
        return value
