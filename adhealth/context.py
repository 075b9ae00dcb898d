from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional
import logging


@dataclass(frozen=True)
class ScoringContext:
    """
    Explicit inputs that would otherwise be ambient: the calendar day treated as
    "today" and an optional predicate selecting campaigns for verbose tracing.
    """
    today: date = field(default_factory=date.today)
    trace: Optional[Callable[[str], bool]] = None

    def is_traced(self, campaign_name: str) -> bool:
        return bool(self.trace and self.trace(campaign_name))

    def note(self, log: logging.Logger, campaign_name: str, msg: str) -> None:
        """Traced campaigns log at INFO, the rest at DEBUG."""
        level = logging.INFO if self.is_traced(campaign_name) else logging.DEBUG
        log.log(level, f"[{campaign_name}] {msg}")


def trace_campaigns(*names: str) -> Callable[[str], bool]:
    wanted = {n.strip() for n in names}
    return lambda name: str(name).strip() in wanted
