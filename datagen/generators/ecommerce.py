"""
E-commerce generator: orders and their parcel lifecycle.

Orders are modelled as a sliding window over two counters. ``next_order_id``
advances when a new order is created, ``next_ship_id`` when the oldest pending
order ships, and ``next_ship_id <= next_order_id`` always holds. A new order is
only created while fewer than ``max_pending_orders`` orders await shipment, so
the backlog stays bounded and shipments follow order ids one by one.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, List, Tuple

from datagen.domain.models import OrderEvent, ParcelEvent, SinkRecord
from datagen.domain.timestamps import format_timestamp, local_now
from datagen.generators.abstract import AbstractLoadGenerator
from datagen.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_CATALOG_SIZE = 1_000
MAX_ITEM_PRICE = 10_000.0
MIN_ITEMS_PER_ORDER = 1
MAX_ITEMS_PER_ORDER = 4


class EcommerceGenerator(AbstractLoadGenerator):
    """
    Emit `OrderEvent`s and `ParcelEvent`s for a stream of orders.

    Each tick flips one coin:

    - heads, with room in the window: create a new order made of 1-4 line items
      followed by its ``order_created`` parcel event;
    - otherwise, with an order pending: ship the oldest pending order;
    - otherwise (tails, nothing pending): emit nothing this tick.

    Parameters
    ----------
    rng : random.Random
        Seeded random source; may be shared with other generators on the loop.
    catalog_size : int
        Number of items in the price catalog drawn at construction.
    max_pending_orders : int
        Orders allowed to await shipment at once. 1 means a new order is only
        created once every earlier order has shipped.
    clock : callable
        Source of the current time, overridable in tests.
    """

    name: str = "ecommerce"
    description: str = "Order line items with order_created/parcel_shipped parcel events."
    _topics = (OrderEvent.topic, ParcelEvent.topic)

    def __init__(
        self,
        rng: random.Random,
        catalog_size: int = DEFAULT_CATALOG_SIZE,
        max_pending_orders: int = 1,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        if catalog_size < 1:
            raise ValueError(f"catalog_size must be >= 1, got {catalog_size}")
        if max_pending_orders < 1:
            raise ValueError(f"max_pending_orders must be >= 1, got {max_pending_orders}")

        self._rng = rng
        self._clock = clock
        self._max_pending_orders = max_pending_orders
        self._next_order_id = 0
        self._next_ship_id = 0
        # Item id -> item price
        self._catalog: Tuple[float, ...] = tuple(
            rng.uniform(0, MAX_ITEM_PRICE) for _ in range(catalog_size)
        )
        log.debug(
            "Catalog generated",
            extra={"catalog_size": catalog_size, "max_pending_orders": max_pending_orders},
        )

    @property
    def next_order_id(self) -> int:
        return self._next_order_id

    @property
    def next_ship_id(self) -> int:
        return self._next_ship_id

    @property
    def pending_orders(self) -> int:
        return self._next_order_id - self._next_ship_id

    @property
    def catalog(self) -> Tuple[float, ...]:
        return self._catalog

    def _flip(self) -> bool:
        return self._rng.random() < 0.5

    def generate(self) -> List[SinkRecord]:
        ts = format_timestamp(self._clock())
        heads = self._flip()

        if heads and self.pending_orders < self._max_pending_orders:
            return self._new_order(ts)
        if self.pending_orders > 0:
            return self._ship_order(ts)
        return []

    def _new_order(self, ts: str) -> List[SinkRecord]:
        self._next_order_id += 1
        order_id = self._next_order_id

        records: List[SinkRecord] = []
        for _ in range(self._rng.randint(MIN_ITEMS_PER_ORDER, MAX_ITEMS_PER_ORDER)):
            item_id = self._rng.randrange(len(self._catalog))
            records.append(
                OrderEvent(
                    order_id=order_id,
                    item_id=item_id,
                    item_price=self._catalog[item_id],
                    event_timestamp=ts,
                )
            )
        records.append(ParcelEvent(order_id=order_id, event_timestamp=ts, event_type="order_created"))
        return records

    def _ship_order(self, ts: str) -> List[SinkRecord]:
        self._next_ship_id += 1
        return [
            ParcelEvent(
                order_id=self._next_ship_id,
                event_timestamp=ts,
                event_type="parcel_shipped",
            )
        ]


__all__ = ["EcommerceGenerator"]
