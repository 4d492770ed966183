"""Convergence polling for lifecycle operations.

A :class:`ConvergencePolicy` couples a target predicate with a
:class:`PollSchedule` (backoff plus attempt/time budget). The same policy type
serves create, start, stop and terminate; only the predicate changes.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_fixed,
)

from .errors import ConvergenceTimeoutError
from .models import InstanceLifecycleState

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXPONENTIAL = "exponential"
FIXED = "fixed"


@dataclass(frozen=True)
class PollSchedule:
    """Backoff and budget shared by every convergence wait."""
    backoff: str = EXPONENTIAL
    interval: float = 2.0
    max_interval: float = 30.0
    max_attempts: int = 60
    max_seconds: Optional[float] = 1200.0

    def __post_init__(self) -> None:
        if self.backoff not in (EXPONENTIAL, FIXED):
            raise ValueError(f"Unsupported backoff {self.backoff!r}")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def wait_strategy(self) -> Any:
        if self.backoff == FIXED:
            return wait_fixed(self.interval)
        return wait_exponential(multiplier=self.interval, max=self.max_interval)

    def stop_strategy(self) -> Any:
        stop = stop_after_attempt(self.max_attempts)
        if self.max_seconds is not None:
            stop = stop | stop_after_delay(self.max_seconds)
        return stop


@dataclass(frozen=True)
class ConvergencePolicy:
    """Target predicate plus the schedule used to wait for it."""
    target: str
    is_converged: Callable[[Any], bool]
    schedule: PollSchedule = field(default_factory=PollSchedule)
    describe: Callable[[Any], Optional[str]] = lambda response: None

    def wait(self, fetch: Callable[[], T], sleep: Callable[[float], None] = time.sleep) -> T:
        """Call ``fetch`` until its result satisfies the target.

        Exceptions raised by ``fetch`` propagate unchanged. Running out of
        budget raises :class:`ConvergenceTimeoutError`.
        """
        retrying = Retrying(
            retry=retry_if_result(lambda response: not self.is_converged(response)),
            stop=self.schedule.stop_strategy(),
            wait=self.schedule.wait_strategy(),
            sleep=sleep,
            before_sleep=self._log_pending,
        )
        try:
            return retrying(fetch)
        except RetryError as exc:
            last_attempt = exc.last_attempt
            raise ConvergenceTimeoutError(
                self.target,
                self.describe(last_attempt.result()),
                last_attempt.attempt_number,
            ) from exc

    def _log_pending(self, retry_state: RetryCallState) -> None:
        response = retry_state.outcome.result() if retry_state.outcome else None
        logger.debug(
            "Waiting for %s: attempt %d observed %s, retrying in %.1fs",
            self.target,
            retry_state.attempt_number,
            self.describe(response),
            retry_state.next_action.sleep if retry_state.next_action else 0.0,
        )


def _instance_lifecycle_state(instance: Any) -> Optional[str]:
    return getattr(instance, "lifecycle_state", None)


def lifecycle_policy(
    target: InstanceLifecycleState, schedule: Optional[PollSchedule] = None
) -> ConvergencePolicy:
    """Build a policy that waits for an instance to report ``target``."""
    return ConvergencePolicy(
        target=target.value,
        is_converged=lambda instance: _instance_lifecycle_state(instance) == target.value,
        schedule=schedule or PollSchedule(),
        describe=_instance_lifecycle_state,
    )
