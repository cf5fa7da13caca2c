"""
rules/buffer_policy.py

Cash-buffer policy: decides each period whether discretionary investing
(portfolio DCA and, by default, extra property repayments) is active or
paused.

Two thresholds give hysteresis. Investing pauses once coverage drops strictly
below ``trigger_months``; it only resumes once coverage is back at or above
``recovery_months``. Between the two thresholds the current mode holds.

## QuickStart

```python
from retirement_planner.rules.buffer_policy import BufferPolicy
from retirement_planner.state.models import BufferMode

policy = BufferPolicy(trigger_months=1, recovery_months=3)
mode = policy.initial_mode(BufferPolicy.coverage(10_000, 4_000))   # 2.5 -> INVESTING
mode = policy.next_mode(mode, 0.8)                                  # -> PAUSED
mode = policy.next_mode(mode, 2.0)                                  # still PAUSED
mode = policy.next_mode(mode, 3.0)                                  # -> INVESTING
```
"""

import logging
from dataclasses import dataclass

from retirement_planner.exceptions import InvalidBufferConfigError
from retirement_planner.state.models import BufferMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BufferPolicy:
    trigger_months: float
    recovery_months: float

    def __post_init__(self):
        if self.recovery_months < self.trigger_months:
            raise InvalidBufferConfigError(
                f"Recovery target {self.recovery_months} is below trigger level {self.trigger_months}",
                field="buffers.recovery_months",
                constraint="recovery_months >= trigger_months",
            )

    @staticmethod
    def coverage(balance: float, monthly_expenses: float) -> float:
        """Months of expenses the buffer covers."""
        if monthly_expenses <= 0:
            return float("inf")
        return balance / monthly_expenses

    def initial_mode(self, coverage: float) -> BufferMode:
        """Mode at the start of a run, using the same rule as from INVESTING."""
        return self.next_mode(BufferMode.INVESTING, coverage)

    def next_mode(self, mode: BufferMode, coverage: float) -> BufferMode:
        if mode is BufferMode.INVESTING and coverage < self.trigger_months:
            return BufferMode.PAUSED
        if mode is BufferMode.PAUSED and coverage >= self.recovery_months:
            return BufferMode.INVESTING
        return mode

    def below_target(self, coverage: float) -> bool:
        return coverage < self.recovery_months
