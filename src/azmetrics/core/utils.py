"""Utility functions and helpers."""

import asyncio
import logging.config
import re
import structlog
import yaml
from pathlib import Path
from typing import Awaitable, Iterable, List, Optional, TypeVar, Union

T = TypeVar('T')

_DURATION_UNITS_MS = {
    'ms': 1,
    's': 1000,
    'm': 60 * 1000,
    'h': 60 * 60 * 1000,
    'd': 24 * 60 * 60 * 1000,
}

_DURATION_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h|d)?\s*$', re.IGNORECASE)


def setup_logging(config_path: Optional[Union[str, Path]] = None, log_level: str = "INFO") -> None:
    """Setup structured logging configuration."""
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
        logging.config.dictConfig(config)
    else:
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if config_path else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def parse_duration_ms(duration: Union[str, int, float]) -> int:
    """Parse a duration such as '5m', '1h', '1d' or a bare millisecond count."""
    if isinstance(duration, bool):
        raise ValueError(f"Invalid duration: {duration!r}")
    if isinstance(duration, (int, float)):
        return int(duration)

    match = _DURATION_RE.match(duration)
    if not match:
        raise ValueError(f"Invalid duration: {duration!r}")

    amount, unit = match.groups()
    return int(float(amount) * _DURATION_UNITS_MS[(unit or 'ms').lower()])


async def gather_with_concurrency(
    coros: Iterable[Awaitable[T]],
    max_concurrency: Optional[int] = None,
) -> List[T]:
    """
    Run coroutines concurrently, optionally capped by a semaphore.

    The first failure cancels every task that is still pending and is
    re-raised; no partial results are returned. A `max_concurrency` of None
    means unbounded; anything below 1 is rejected.
    """
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency is not None else None

    async def limited_coro(coro):
        if semaphore is None:
            return await coro
        async with semaphore:
            return await coro

    tasks = [asyncio.ensure_future(limited_coro(coro)) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
