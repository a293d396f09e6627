"""
Shared fixtures for adversarial tests.

Provides a helper for hammering one Store from many threads.
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import pytest


def _run_concurrently(tasks: list[Callable[[], object]], workers: int = 8) -> list[object]:
    """
    Run callables in parallel and collect results or raised exceptions.

    Exceptions are returned in place of results so tests can count outcomes.
    """

    def capture(task: Callable[[], object]) -> object:
        try:
            return task()
        except Exception as e:
            return e

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(capture, tasks))


@pytest.fixture
def run_concurrently() -> Callable[..., list[object]]:
    return _run_concurrently
