"""Reversing steps for multi-step operations that have no shared transaction."""

from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class Compensation:
    """Records how to undo each completed step, and undoes them newest first."""

    def __init__(self) -> None:
        self._steps: list[tuple[str, Callable[[], object]]] = []

    def __len__(self) -> int:
        return len(self._steps)

    def record(self, description: str, undo: Callable[[], object]) -> None:
        self._steps.append((description, undo))

    def unwind(self) -> list[tuple[str, Exception]]:
        """Run every recorded step in reverse. Returns the ones that failed.

        A failing step does not stop the others from running.
        """
        failures = []
        for description, undo in reversed(self._steps):
            try:
                undo()
            except Exception as exc:
                logger.error("Compensation step failed", step=description, error=str(exc))
                failures.append((description, exc))
        self._steps.clear()
        return failures
