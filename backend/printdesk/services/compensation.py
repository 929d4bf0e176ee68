# Overview: Compensation log for multi-step writes made of independent store round-trips.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from flask import current_app


@dataclass(frozen=True)
class CompensationStep:
    description: str
    action: Callable[[], object]


class CompensationLog:
    """
    Inverse actions for the committed steps of one operation.

    Each committed step pushes its inverse; unwind() runs them newest first.
    A failing inverse does not stop the others: its failure is returned so
    the caller can report a partial failure.
    """

    def __init__(self, label: str):
        self.label = label
        self._steps: list[CompensationStep] = []

    def __len__(self) -> int:
        return len(self._steps)

    def push(self, description: str, action: Callable[[], object]) -> None:
        self._steps.append(CompensationStep(description, action))

    def unwind(self) -> list[dict]:
        failures = []
        while self._steps:
            step = self._steps.pop()
            try:
                step.action()
            except Exception as exc:
                current_app.logger.error(
                    "Compensation '%s' for %s failed: %s", step.description, self.label, exc
                )
                failures.append({"step": step.description, "error": str(exc)})
            else:
                current_app.logger.warning("Compensated '%s' for %s", step.description, self.label)
        return failures
