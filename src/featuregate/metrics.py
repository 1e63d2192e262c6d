"""OpenTelemetry メトリクス定義"""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("featuregate", version="0.1.0")

evaluations_total = _meter.create_counter(
    name="featureflag_evaluations_total",
    description="Total number of feature flag evaluations",
    unit="1",
)

evaluation_cache_hits_total = _meter.create_counter(
    name="featureflag_evaluation_cache_hits_total",
    description="Total number of per-user evaluations served from cache",
    unit="1",
)
