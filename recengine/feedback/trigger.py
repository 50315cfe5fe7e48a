from __future__ import annotations

import logging
import random
from collections.abc import Callable

from ..config import DEFAULT_RESOLUTION_CONFIG, ResolutionConfig

logger = logging.getLogger(__name__)


def should_trigger_feedback(
    time_away_seconds: float,
    has_existing_feedback: bool = False,
    rng: Callable[[], float] | None = None,
    config: ResolutionConfig = DEFAULT_RESOLUTION_CONFIG,
) -> bool:
    """Decide whether to ask a user who came back from an outbound link.

    Only users away longer than ``feedback_min_seconds_away`` qualify, and
    only a ``feedback_trigger_probability`` share of those are asked.
    """
    if has_existing_feedback:
        return False
    if time_away_seconds <= config.feedback_min_seconds_away:
        return False
    draw = (rng or random.random)()
    triggered = draw < config.feedback_trigger_probability
    logger.debug("Feedback draw %.3f after %.0fs away -> %s", draw, time_away_seconds, triggered)
    return triggered
