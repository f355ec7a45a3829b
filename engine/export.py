"""
export.py — Session export
===========================
Serialises the performance panel for download.

    session_record(metrics, "bfs")  → dict  {timestamp, session_id, algorithm, metrics}
    to_json(metrics, "bfs")         → str   (pretty-printed record)
    to_csv(metrics)                 → str   Metric,Value rows
"""

import csv
import io
import json
import uuid
from datetime import datetime, timezone
from typing import Optional

from engine.metrics import PerformanceMetrics


def new_session_id() -> str:
    return uuid.uuid4().hex[:9]


def session_record(
    metrics: PerformanceMetrics,
    algorithm: Optional[str] = None,
    session_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> dict:
    return {
        "timestamp":  (now or datetime.now(timezone.utc)).isoformat(),
        "session_id": session_id or new_session_id(),
        "algorithm":  algorithm,
        "metrics":    metrics.to_dict(),
    }


def to_json(
    metrics: PerformanceMetrics,
    algorithm: Optional[str] = None,
    session_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    return json.dumps(session_record(metrics, algorithm, session_id, now), indent=2)


def to_csv(metrics: PerformanceMetrics) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Metric", "Value"])
    writer.writerow(["Execution Time (ms)", f"{metrics.execution_time_ms:.3f}"])
    writer.writerow(["Nodes Explored", metrics.nodes_explored])
    writer.writerow(["Total Nodes", metrics.total_nodes])
    writer.writerow(["Memory Usage (bytes)", metrics.memory_usage_estimate])
    writer.writerow(["Step Count", metrics.step_count])
    writer.writerow(["Completion Status", "Complete" if metrics.is_complete else "In Progress"])
    return buf.getvalue()
