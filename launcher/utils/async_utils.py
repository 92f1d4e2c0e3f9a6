import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

# Shared thread pool for blocking filesystem work (scans, cache writes)
_executor = ThreadPoolExecutor(
    max_workers=2,
    thread_name_prefix="launcher_bg"
)

T = TypeVar('T')


async def run_in_executor(func: Callable[..., T], *args, **kwargs) -> T:
    """
    Run a blocking/synchronous function in the shared thread pool.

    Usage:
        result = await run_in_executor(blocking_function, arg1, arg2, key=value)
    """
    loop = asyncio.get_running_loop()

    try:
        if kwargs:
            return await loop.run_in_executor(_executor, partial(func, *args, **kwargs))
        return await loop.run_in_executor(_executor, func, *args)

    except Exception as e:
        name = getattr(func, "__name__", repr(func))
        logger.error(f"Error executing {name} in executor: {e}", exc_info=True)
        raise


def cleanup_executor():
    """
    Cleanup the thread pool executor.
    Call this when shutting down the launcher.
    """
    logger.debug("Shutting down background executor...")
    _executor.shutdown(wait=False, cancel_futures=True)
