from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from sous_chef.config import Settings
from sous_chef.services.exceptions import RepoError
from sous_chef.services.repo.json_repo import _locked  # reuse the cross-platform lock

logger = logging.getLogger(__name__)


class MetricsLogger:
    """Append-only JSONL logger for latency metrics.

    Writes one JSON object per line with fields:
      - ts: ISO timestamp (UTC)
      - kind: "latency"
      - name: short name (e.g., "what_can_i_cook", "cook_view_render")
      - origin: "backend" | "frontend"
      - duration_ms: float
      - extra: optional dict with contextual fields
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.path = self.settings.metrics_file

    def log_latency(
        self,
        name: str,
        duration_ms: float,
        origin: str,
        extra: Optional[Dict[str, Any]] = None,
        corr_id: Optional[str] = None,
    ) -> None:
        entry: Dict[str, Any] = {
            "ts": datetime.utcnow().isoformat(),
            "kind": "latency",
            "name": name,
            "origin": origin,
            "duration_ms": float(duration_ms),
        }
        if corr_id:
            entry["corr"] = corr_id
        if extra:
            entry["extra"] = extra
        line = (json.dumps(entry, ensure_ascii=False, separators=(",", ":"), default=str) + "\n").encode("utf-8")
        try:
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except (OSError, RepoError) as e:
            # metrics never fail a request
            logger.debug("dropping latency metric %s: %s", name, e)

    @contextmanager
    def timed(self, name: str, extra: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Time a block and log it as a backend latency; the yielded dict extends `extra`."""
        fields: Dict[str, Any] = dict(extra or {})
        t0 = time.perf_counter()
        yield fields
        self.log_latency(name, (time.perf_counter() - t0) * 1000.0, origin="backend", extra=fields)
