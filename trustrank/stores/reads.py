from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def guarded_read(
    what: str,
    read: Callable[..., Awaitable[Any]],
    *args: Any,
    default: T,
    timeout: float,
) -> Any | T:
    """
    Await a store read with a timeout.

    Returns *default* on any failure (timeout, DataUnavailableError, driver
    error) so one broken input never aborts the whole request.
    """
    try:
        return await asyncio.wait_for(read(*args), timeout)
    except Exception:
        logger.warning("%s failed, falling back to %r", what, default, exc_info=True)
        return default
