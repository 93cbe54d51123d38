from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from sous_chef.api.deps import get_metrics
from sous_chef.services.metrics import MetricsLogger

router = APIRouter(tags=["metrics"])


class UILatency(BaseModel):
    name: str = Field(..., description="Metric name, e.g. 'cook_view_render'")
    duration_ms: float = Field(..., ge=0)
    extra: dict | None = None


@router.post("/api/v1/metrics/ui")
def log_ui_latency(payload: UILatency, metrics: MetricsLogger = Depends(get_metrics)):
    metrics.log_latency(payload.name, payload.duration_ms, origin="frontend", extra=payload.extra)
    return {"ok": True}
