"""featuregate: progressive feature rollout library."""

from .cache import EvaluationCache, InMemoryEvaluationCache
from .config import CacheSection, FeatureGateConfig, FlagSeed, LogSection
from .engine import enabled_map, evaluate, evaluate_all, is_enabled_for_user
from .exceptions import FeatureFlagError, FeatureFlagErrorCodes, ValidationError
from .hashing import fnv1a_32, rollout_bucket
from .loader import build_service, load, seed_flags
from .logger import new_logger
from .memory import InMemoryFlagStore
from .models import (
    CreateFeatureFlagRequest,
    EvaluationReason,
    EvaluationResult,
    FeatureFlag,
    UpdateFeatureFlagRequest,
    User,
    UserOverride,
)
from .plans import PLAN_HIERARCHY, is_known_plan, meets_plan, plan_rank
from .service import FeatureFlagService
from .store import FlagStore
from .validation import (
    is_valid_key,
    validate_create_request,
    validate_key,
    validate_min_plan,
    validate_rollout_percentage,
    validate_update_request,
    validate_user_id,
)

__all__ = [
    "CacheSection",
    "CreateFeatureFlagRequest",
    "EvaluationCache",
    "EvaluationReason",
    "EvaluationResult",
    "FeatureFlag",
    "FeatureFlagError",
    "FeatureFlagErrorCodes",
    "FeatureFlagService",
    "FeatureGateConfig",
    "FlagSeed",
    "FlagStore",
    "InMemoryEvaluationCache",
    "InMemoryFlagStore",
    "LogSection",
    "PLAN_HIERARCHY",
    "UpdateFeatureFlagRequest",
    "User",
    "UserOverride",
    "ValidationError",
    "build_service",
    "enabled_map",
    "evaluate",
    "evaluate_all",
    "fnv1a_32",
    "is_enabled_for_user",
    "is_known_plan",
    "is_valid_key",
    "load",
    "meets_plan",
    "new_logger",
    "plan_rank",
    "rollout_bucket",
    "seed_flags",
    "validate_create_request",
    "validate_key",
    "validate_min_plan",
    "validate_rollout_percentage",
    "validate_update_request",
    "validate_user_id",
]
