"""
Record models emitted by the load generators.

Every record is a frozen pydantic model carrying its destination topic, a
partition key derived from a stable entity id, and two projections:

- ``to_sql()``: a parameterized ``INSERT`` for the record's table, composed with
  ``psycopg.sql`` so identifiers are quoted and values are bound, never inlined.
- ``to_json()``: the field-name-tagged document published to the message bus.
"""
from __future__ import annotations

import abc
from typing import Any, ClassVar, Literal, Tuple

from psycopg import sql
from pydantic import BaseModel, Field
from pydantic_core import PydanticSerializationError

ParcelEventType = Literal["order_created", "parcel_shipped"]


class RecordEncodingError(ValueError):
    """Raised when a record cannot be projected into its document form."""

    def __init__(self, record: "SinkRecord", reason: str) -> None:
        super().__init__(f"Failed to encode {type(record).__name__} for topic '{record.topic}': {reason}")
        self.record = record


class SinkRecord(BaseModel, abc.ABC):
    """
    Base class for one synthesized event.

    Subclasses set ``topic`` and ``table`` and implement ``key``. The declared
    model fields, in order, are the payload and the table's column list.
    """

    topic: ClassVar[str]
    table: ClassVar[str]

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @property
    @abc.abstractmethod
    def key(self) -> str:
        """Partition key: the stringified entity id."""

    @classmethod
    def columns(cls) -> Tuple[str, ...]:
        return tuple(cls.model_fields)

    def to_sql(self) -> Tuple[sql.Composed, Tuple[Any, ...]]:
        """
        Row-insert projection.

        Returns
        -------
        tuple[sql.Composed, tuple]
            The ``INSERT`` statement and its positional parameters, ready for
            ``cursor.execute(query, params)``.
        """
        columns = self.columns()
        query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values})").format(
            table=sql.Identifier(self.table),
            columns=sql.SQL(", ").join(map(sql.Identifier, columns)),
            values=sql.SQL(", ").join(sql.Placeholder() * len(columns)),
        )
        return query, tuple(getattr(self, name) for name in columns)

    def to_json(self) -> bytes:
        try:
            return self.model_dump_json().encode("utf-8")
        except PydanticSerializationError as exc:
            raise RecordEncodingError(self, str(exc)) from exc


class ClickEvent(SinkRecord):
    """An ad impression and the click that followed it."""

    topic: ClassVar[str] = "ad_clicks"
    table: ClassVar[str] = "ad_source"

    user_id: int = Field(..., ge=0)
    ad_id: int = Field(..., ge=0)
    click_timestamp: str
    impression_timestamp: str

    @property
    def key(self) -> str:
        return str(self.user_id)


class OrderEvent(SinkRecord):
    """One line item of an order."""

    topic: ClassVar[str] = "order_events"
    table: ClassVar[str] = "order_events"

    order_id: int = Field(..., ge=1)
    item_id: int = Field(..., ge=0)
    item_price: float = Field(..., ge=0)
    event_timestamp: str

    @property
    def key(self) -> str:
        return str(self.order_id)


class ParcelEvent(SinkRecord):
    """
    Lifecycle event of an order's parcel.

    Each order produces two of these over its life: ``order_created`` together
    with its line items, then ``parcel_shipped`` once it leaves the window.
    """

    topic: ClassVar[str] = "parcel_events"
    table: ClassVar[str] = "parcel_events"

    order_id: int = Field(..., ge=1)
    event_timestamp: str
    event_type: ParcelEventType

    @property
    def key(self) -> str:
        return str(self.order_id)


__all__ = [
    "ClickEvent",
    "OrderEvent",
    "ParcelEvent",
    "ParcelEventType",
    "RecordEncodingError",
    "SinkRecord",
]
