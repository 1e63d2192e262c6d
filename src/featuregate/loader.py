"""設定ファイル読み込みとフラグ初期投入"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from .cache import InMemoryEvaluationCache
from .config import FeatureGateConfig
from .exceptions import FeatureFlagError, FeatureFlagErrorCodes
from .logger import DEFAULT_LOGGER_NAME, new_logger
from .memory import InMemoryFlagStore
from .service import FeatureFlagService
from .store import FlagStore


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """base と override をディープマージして新しい辞書を返す。

    override の値が優先される。リスト（flags を含む）は置換（マージしない）。
    """
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _config_error(message: str, cause: Exception | None = None) -> FeatureFlagError:
    return FeatureFlagError(code=FeatureFlagErrorCodes.CONFIG_ERROR, message=message, cause=cause)


def _read_flag_config(path: Path) -> dict[str, Any]:
    """フラグ設定 YAML を読み込む。トップレベルはマッピングでなければならない。"""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise _config_error(f"Failed to read feature flag config: {path}", e) from e
    except yaml.YAMLError as e:
        raise _config_error(f"Failed to parse feature flag config: {path}", e) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _config_error(
            f"Feature flag config must be a mapping, got {type(data).__name__}: {path}"
        )
    return data


def load(base_path: Path, env_path: Path | None = None) -> FeatureGateConfig:
    """設定ファイルを読み込んで FeatureGateConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
        flags はリストのため環境別設定で丸ごと置き換わる。
    """
    data = _read_flag_config(base_path)
    if env_path is not None and env_path.exists():
        data = deep_merge(data, _read_flag_config(env_path))
    try:
        return FeatureGateConfig.model_validate(data)
    except ValidationError as e:
        raise _config_error(f"Feature flag config validation failed: {e}", e) from e


async def seed_flags(service: FeatureFlagService, config: FeatureGateConfig) -> int:
    """設定のフラグ定義を投入する。既存キーはスキップし、作成件数を返す。"""
    existing = {flag.key for flag in await service.list_flags()}
    created = 0
    for seed in config.flags:
        if seed.key in existing:
            continue
        await service.create_flag(seed.to_request())
        existing.add(seed.key)
        created += 1
    if created:
        logger = structlog.stdlib.get_logger(DEFAULT_LOGGER_NAME)
        logger.info("feature_flags_seeded", count=created)
    return created


async def build_service(
    config: FeatureGateConfig, store: FlagStore | None = None
) -> FeatureFlagService:
    """設定からロガー・キャッシュを構成し、フラグ投入済みのサービスを返す。"""
    logger = new_logger(
        level=config.log.level,
        format=config.log.format,
        cache_enabled=config.cache.enabled,
    )
    cache = InMemoryEvaluationCache(ttl=config.cache.ttl_seconds) if config.cache.enabled else None
    service = FeatureFlagService(store or InMemoryFlagStore(), cache=cache, logger=logger)
    await seed_flags(service, config)
    return service
