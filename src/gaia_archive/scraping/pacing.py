"""Fixed-delay pacing between platform calls."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from gaia_archive.core.config import CollectorConfig
from gaia_archive.core.constants import DEFAULT_DETAIL_DELAY, DEFAULT_REQUEST_DELAY


@dataclass(frozen=True)
class PacingPolicy:
    """Delays the collector waits between platform calls.

    The delays are fixed. The platform throttles by request cadence, so there
    is no adaptive backoff: a rate-limit answer ends the run instead.

    Attributes:
        request_delay: Seconds to wait after every listing or match fetch.
        detail_delay: Seconds to wait between a match's log and detail fetches.
        sleep: Blocking sleep function; replaced in tests.
    """

    request_delay: float = DEFAULT_REQUEST_DELAY
    detail_delay: float = DEFAULT_DETAIL_DELAY
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False)

    @classmethod
    def none(cls) -> "PacingPolicy":
        """A policy that never waits."""
        return cls(request_delay=0.0, detail_delay=0.0, sleep=lambda _s: None)

    @classmethod
    def from_config(cls, config: CollectorConfig) -> "PacingPolicy":
        return cls(
            request_delay=config.request_delay, detail_delay=config.detail_delay
        )

    def after_request(self) -> None:
        if self.request_delay > 0:
            self.sleep(self.request_delay)

    def between_log_and_detail(self) -> None:
        if self.detail_delay > 0:
            self.sleep(self.detail_delay)
