"""
Ad-click generator: one impression and its click per tick.

Stateless; each record is drawn independently from the injected random source.
The click is stamped at or after the impression, within one second of it.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Callable, List

from datagen.domain.models import ClickEvent, SinkRecord
from datagen.domain.timestamps import format_timestamptz, local_now
from datagen.generators.abstract import AbstractLoadGenerator

NUM_USERS = 100_000
NUM_ADS = 10
MAX_CLICK_DELAY_MS = 1_000


class AdClickGenerator(AbstractLoadGenerator):
    """Emit `ClickEvent`s keyed by user id to the `ad_clicks` topic."""

    name: str = "ad-click"
    description: str = "Ad impressions followed by a click within one second."
    _topics = (ClickEvent.topic,)

    def __init__(self, rng: random.Random, clock: Callable[[], datetime] = local_now) -> None:
        self._rng = rng
        self._clock = clock

    def generate(self) -> List[SinkRecord]:
        impression = self._clock()
        click = impression + timedelta(milliseconds=self._rng.randrange(MAX_CLICK_DELAY_MS))
        return [
            ClickEvent(
                user_id=self._rng.randrange(NUM_USERS),
                ad_id=self._rng.randrange(NUM_ADS),
                click_timestamp=format_timestamptz(click),
                impression_timestamp=format_timestamptz(impression),
            )
        ]


__all__ = ["AdClickGenerator"]
