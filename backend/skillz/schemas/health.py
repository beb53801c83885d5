"""
Response bodies of the Skillz liveness and readiness endpoints.
"""

from datetime import datetime
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """The process is up; nothing else is checked."""
    status: Literal["ok"]
    service: str = Field(description="Project name from settings")
    version: str
    timestamp: datetime


class CheckResult(BaseModel):
    """Outcome of one dependency probe (only the database today)."""
    healthy: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class ReadinessResponse(BaseModel):
    """
    Whether the directory can serve requests.

    ``status`` is "not_ready" as soon as one check fails, and the
    endpoint answers 503 in that case.
    """
    status: Literal["ready", "not_ready"]
    service: str
    checks: Dict[str, CheckResult]
    timestamp: datetime
