"""
Health probe functions for dependency checks.

Each probe returns True when the dependency is healthy and swallows
failures into False, so the readiness endpoint can report them.
"""

import asyncio
import time
from typing import Tuple

from sqlalchemy import text

from skillz.core.database import async_session_maker
from skillz.core.logging_config import get_logger


logger = get_logger(__name__)


async def check_database(timeout_seconds: float = 2.0) -> bool:
    """
    Check database connectivity.

    Executes SELECT 1 with a timeout so an unreachable database
    cannot hang the probe.

    Args:
        timeout_seconds: Maximum time to wait for response (default: 2.0)

    Returns:
        True if database is reachable and healthy, False otherwise
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            async with async_session_maker() as session:
                result = await session.execute(text("SELECT 1"))
                result.scalar()
                return True
    except asyncio.TimeoutError:
        logger.warning("Database probe timed out", extra={"timeout_seconds": timeout_seconds})
        return False
    except Exception as exc:
        logger.warning(f"Database probe failed: {exc}")
        return False


async def timed_probe(probe) -> Tuple[bool, float]:
    """
    Run a probe and measure it.

    Returns:
        (healthy, latency in milliseconds)
    """
    start = time.perf_counter()
    healthy = await probe()
    return healthy, round((time.perf_counter() - start) * 1000, 2)
