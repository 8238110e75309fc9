# ─────────────────────────────────────────────────────────────────────────────
# Submission Metrics — thread-safe outcome counters
# ─────────────────────────────────────────────────────────────────────────────
# Process-local, reset on restart. Exposed via GET /metrics (JSON) and
# GET /metrics/prometheus.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class Outcome(StrEnum):
    """How a handled submission ended."""

    delivered = "delivered"
    invalid = "invalid"
    delivery_failed = "delivery_failed"
    error = "error"


@dataclass
class SubmissionMetrics:
    """Counts submissions by outcome, plus rate-limit rejections."""

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    submissions_total: int = 0
    delivered_total: int = 0
    validation_failures: int = 0
    delivery_failures: int = 0
    errors_total: int = 0
    rate_limited_total: int = 0

    _start_time: float = field(default_factory=time.time, repr=False)

    def record_submission(self, outcome: Outcome) -> None:
        with self._lock:
            self.submissions_total += 1
            if outcome is Outcome.delivered:
                self.delivered_total += 1
            elif outcome is Outcome.invalid:
                self.validation_failures += 1
            elif outcome is Outcome.delivery_failed:
                self.delivery_failures += 1
            else:
                self.errors_total += 1

    def record_rate_limited(self) -> None:
        with self._lock:
            self.rate_limited_total += 1

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "submissions_total": self.submissions_total,
                "delivered_total": self.delivered_total,
                "validation_failures": self.validation_failures,
                "delivery_failures": self.delivery_failures,
                "errors_total": self.errors_total,
                "rate_limited_total": self.rate_limited_total,
                "uptime_seconds": int(time.time() - self._start_time),
            }
