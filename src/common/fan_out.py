"""
Thread-pool fan-out with per-item error capture.
Every item gets exactly one outcome; a failing item never cancels or hides its siblings.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Generic, TypeVar

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")

LOGGER = logging.getLogger("common.fan_out")


@dataclass(frozen=True)
class TaskOutcome(Generic[ItemT, ResultT]):
    item: ItemT
    result: ResultT | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fan_out(
    items: Sequence[ItemT],
    func: Callable[[ItemT], ResultT],
    *,
    max_workers: int,
    label: str = "task",
) -> list[TaskOutcome[ItemT, ResultT]]:
    """Run `func` for every item concurrently and join on all of them.

    Outcomes are returned in input order. Exceptions raised by `func` are
    captured on the outcome and logged; they are never re-raised here.
    """

    if max_workers <= 0:
        raise ValueError("max_workers must be greater than 0.")
    if not items:
        return []

    workers = min(max_workers, len(items))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=label) as executor:
        futures: list[Future[ResultT]] = [executor.submit(func, item) for item in items]

    outcomes: list[TaskOutcome[ItemT, ResultT]] = []
    for item, future in zip(items, futures):
        error = future.exception()
        if error is not None:
            LOGGER.warning("%s failed item=%r error=%s", label, item, error)
            outcomes.append(TaskOutcome(item=item, error=error))
        else:
            outcomes.append(TaskOutcome(item=item, result=future.result()))
    return outcomes
