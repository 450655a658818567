"""Utilities for reporting pipeline steps."""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


_STEPS: contextvars.ContextVar[tuple[str, ...]] = contextvars.ContextVar(
    "steps", default=()
)


@contextmanager
def step(name: str) -> Generator[None, None, None]:
    """Announce a named pipeline step and log how long it took.

    Nested steps are reported by their full path at debug level.
    """
    path = _STEPS.get() + (name,)
    token = _STEPS.set(path)
    _LOGGER.info("# %s", name)
    start = perf_counter()
    try:
        yield
    finally:
        _STEPS.reset(token)
        _LOGGER.debug(
            "Finished %s in %0.2fs", " > ".join(path), perf_counter() - start
        )
