"""Per-step outcomes collected for downstream reporting."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Any, Literal

logger = logging.getLogger(__name__)

StepStatus = Literal["passed", "failed", "skipped", "undefined", "pending"]


@dataclass(frozen=True)
class StepOutcome:
    """What happened to one step of one scenario."""

    feature: str
    scenario: str
    keyword: str
    step: str
    status: StepStatus
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class StepOutcomeRecorder:
    """Thread-safe, append-only record of step outcomes for a session."""

    def __init__(self) -> None:
        self._outcomes: list[StepOutcome] = []
        self._lock = threading.Lock()

    def record(
        self,
        feature: str,
        scenario: str,
        keyword: str,
        step: str,
        status: StepStatus,
        error: BaseException | None = None,
    ) -> StepOutcome:
        outcome = StepOutcome(
            feature=feature,
            scenario=scenario,
            keyword=keyword,
            step=step,
            status=status,
            error=str(error) if error is not None else None,
        )
        with self._lock:
            self._outcomes.append(outcome)

        if status == "passed":
            logger.debug("%s %s: passed", keyword, step)
        else:
            logger.info("%s %s: %s", keyword, step, status)
        return outcome

    @property
    def outcomes(self) -> list[StepOutcome]:
        with self._lock:
            return list(self._outcomes)

    def for_scenario(self, scenario: str) -> list[StepOutcome]:
        return [outcome for outcome in self.outcomes if outcome.scenario == scenario]

    def summary(self) -> dict[str, int]:
        """Number of steps per status."""
        return dict(Counter(outcome.status for outcome in self.outcomes))

    def clear(self) -> None:
        with self._lock:
            self._outcomes.clear()
