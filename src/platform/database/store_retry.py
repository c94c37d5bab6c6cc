"""
Bounded retry for transient store failures.

Only wrap operations that are safe to repeat: idempotent ledger calls keyed by
reservation id, compare-and-set transitions, and reads.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import StoreUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.registration_metrics import metrics


T = TypeVar('T')

TRANSIENT_STORE_ERRORS: tuple[type[BaseException], ...] = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    ConnectionError,
    TimeoutError,
)


async def retry_store_operation(
    operation: Callable[[], Awaitable[T]],
    *,
    name: str,
    max_attempts: Optional[int] = None,
    base_delay: Optional[float] = None,
    max_delay: Optional[float] = None,
) -> T:
    """
    Run `operation`, retrying transient store errors with exponential backoff.

    Raises:
        StoreUnavailableError: When the last attempt still fails transiently
    """
    attempts = max_attempts or settings.STORE_RETRY_ATTEMPTS
    delay = settings.STORE_RETRY_BASE_DELAY if base_delay is None else base_delay
    delay_cap = settings.STORE_RETRY_MAX_DELAY if max_delay is None else max_delay

    for attempt in range(attempts):
        try:
            return await operation()
        except TRANSIENT_STORE_ERRORS as e:
            if attempt < attempts - 1:
                Logger.base.warning(
                    f'⏳ [STORE] {name} failed, attempt {attempt + 1}/{attempts}, '
                    f'retrying in {delay:.3f}s | {type(e).__name__}: {e}'
                )
                metrics.store_retries.labels(operation=name).inc()
                await asyncio.sleep(delay)
                delay = min(delay * 2, delay_cap)
            else:
                Logger.base.error(f'❌ [STORE] {name} gave up after {attempts} attempts | {e}')
                raise StoreUnavailableError(f'Store unavailable during {name}') from e

    # attempts < 1
    raise StoreUnavailableError(f'Store unavailable during {name}')
