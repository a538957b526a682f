# backend/reserve_api/services/bookings/store.py
"""
Storage boundary for partner bookings.

The booking table is shared with the merchant back-office and evolves on its
own schedule, so it is reflected at use instead of being bound to the ORM
model. Everything that depends on the deployed shape lives here:

- coarse type category of each column (integer/decimal/time/date/datetime/text)
- which columns are structurally required (NOT NULL, no default, not generated)
- how booking state is encoded (`status` text and/or `annulation`/`refuse` flags)
- how slot date / hour values are represented (text vs DATE / TIME)
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from sqlalchemy import MetaData, Table, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import sqltypes

logger = logging.getLogger(__name__)

BOOKING_TABLE = "booking"
MERCHANT_TABLE = "restaurant"

CANCELLED_STATUSES = ("CANCELLED", "CANCELED")
REJECTED_STATUSES = ("REJECTED", "REFUSED")


class DuplicateBookingId(Exception):
    """Insert rejected because a booking with the same guid already exists."""

    def __init__(self, guid: str):
        super().__init__(f"booking guid already exists: {guid}")
        self.guid = guid


class BookingState(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"

    @property
    def is_active(self) -> bool:
        return self is BookingState.CONFIRMED


class Category(str, Enum):
    INTEGER = "integer"
    DECIMAL = "decimal"
    TIME = "time"
    DATE = "date"
    DATETIME = "datetime"
    TEXT = "text"


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    category: Category
    nullable: bool
    has_default: bool
    generated: bool

    @property
    def required(self) -> bool:
        """Insert fails unless a value is supplied."""
        return not self.nullable and not self.has_default and not self.generated


def category_of(sa_type) -> Category:
    # DateTime before Date/Time: TIMESTAMP is a DateTime subclass
    if isinstance(sa_type, sqltypes.DateTime):
        return Category.DATETIME
    if isinstance(sa_type, sqltypes.Date):
        return Category.DATE
    if isinstance(sa_type, sqltypes.Time):
        return Category.TIME
    if isinstance(sa_type, (sqltypes.Integer, sqltypes.Boolean)):
        return Category.INTEGER
    # Float / REAL / Double are not Numeric subclasses on every SQLAlchemy 2.x
    if isinstance(sa_type, (sqltypes.Numeric, sqltypes.Float)):
        return Category.DECIMAL
    return Category.TEXT


# ── Value coercion per category ──────────────────────────────────────────


def date_value(category: Category, dt: datetime) -> Any:
    if category is Category.DATE:
        return dt.date()
    if category is Category.DATETIME:
        return datetime.combine(dt.date(), time())
    return dt.strftime("%Y-%m-%d")


def time_value(category: Category, dt: datetime, seconds: bool = False) -> Any:
    if category is Category.TIME:
        return time(dt.hour, dt.minute)
    return dt.strftime("%H:%M:%S" if seconds else "%H:%M")


def timestamp_value(category: Category, now: datetime) -> Any:
    """Wall-clock timestamp; stored naive since the columns carry no zone."""
    naive = now.replace(tzinfo=None, microsecond=0)
    if category is Category.DATETIME:
        return naive
    if category is Category.DATE:
        return naive.date()
    if category is Category.TIME:
        return naive.time()
    return naive.strftime("%Y-%m-%d %H:%M:%S")


# ── Store ────────────────────────────────────────────────────────────────


class BookingStore:
    """
    Queries and writes against the booking table for one DB session.

    Reflection happens once per store instance, so build a fresh store per
    request to pick up schema changes.
    """

    def __init__(self, db: Session, table_name: str = BOOKING_TABLE):
        self.db = db
        self.table_name = table_name
        self._table: Optional[Table] = None

    # -- schema ----------------------------------------------------------

    @property
    def table(self) -> Table:
        if self._table is None:
            self._table = Table(
                self.table_name,
                MetaData(),
                autoload_with=self.db.connection(),
            )
        return self._table

    def has_column(self, name: str) -> bool:
        return name in self.table.c

    def category(self, name: str) -> Category:
        return category_of(self.table.c[name].type)

    def describe_columns(self) -> list[ColumnInfo]:
        table = self.table
        auto_col = table.autoincrement_column
        return [
            ColumnInfo(
                name=col.name,
                category=category_of(col.type),
                nullable=bool(col.nullable),
                has_default=col.server_default is not None or col.default is not None,
                generated=(
                    col is auto_col
                    or col.identity is not None
                    or col.computed is not None
                ),
            )
            for col in table.columns
        ]

    # -- merchants -------------------------------------------------------

    def resolve_merchant_id(self, guid: str) -> Optional[int]:
        from ...models.generated import Restaurant

        guid = (guid or "").strip()
        if not guid:
            return None
        rid = self.db.query(Restaurant.id).filter(Restaurant.guid == guid).scalar()
        return int(rid) if rid else None

    # -- state encoding --------------------------------------------------

    def state_of(self, row: dict) -> BookingState:
        """Translate whichever state encoding the row carries."""
        status = str(row.get("status") or "").strip().upper()
        if status in CANCELLED_STATUSES or _truthy(row.get("annulation")):
            return BookingState.CANCELLED
        if status in REJECTED_STATUSES or _truthy(row.get("refuse")):
            return BookingState.REJECTED
        return BookingState.CONFIRMED

    def state_fields(self, state: BookingState) -> dict:
        """Column values encoding `state` for this schema."""
        fields: dict[str, Any] = {}
        if self.has_column("status"):
            fields["status"] = state.value
        if self.has_column("annulation") and state is not BookingState.REJECTED:
            fields["annulation"] = 1 if state is BookingState.CANCELLED else 0
        if self.has_column("refuse") and state is not BookingState.CANCELLED:
            fields["refuse"] = 1 if state is BookingState.REJECTED else 0
        return fields

    def _active_clauses(self) -> list:
        c = self.table.c
        clauses = []
        if "annulation" in c:
            clauses.append(or_(c.annulation.is_(None), c.annulation == 0))
        if "refuse" in c:
            clauses.append(or_(c.refuse.is_(None), c.refuse == 0))
        if "status" in c:
            clauses.append(or_(
                c.status.is_(None),
                func.upper(c.status).notin_(CANCELLED_STATUSES + REJECTED_STATUSES),
            ))
        return clauses

    # -- slot values -----------------------------------------------------

    def slot_fields(self, start: datetime) -> dict:
        """date / hour columns for a slot, in the column's own representation."""
        return {
            "date": date_value(self.category("date"), start),
            "hour": time_value(self.category("hour"), start),
        }

    # -- reads -----------------------------------------------------------

    def count_active(self, restaurant_id: int, day: date, at: time) -> int:
        """Bookings neither cancelled nor rejected at exactly (day, HH:MM)."""
        c = self.table.c
        slot = datetime.combine(day, at)
        hour_category = self.category("hour")
        if hour_category is Category.TIME:
            hour_clause = c.hour == time_value(hour_category, slot)
        else:
            # HH:MM, or HH:MM:SS when written by an older client
            hour_clause = c.hour.in_([
                time_value(hour_category, slot),
                time_value(hour_category, slot, seconds=True),
            ])

        query = (
            select(func.count())
            .select_from(self.table)
            .where(
                c.restaurant_id == restaurant_id,
                c.date == date_value(self.category("date"), slot),
                hour_clause,
                *self._active_clauses(),
            )
        )
        return int(self.db.execute(query).scalar() or 0)

    def find_by_identifier(self, restaurant_id: int, guid: str) -> Optional[dict]:
        c = self.table.c
        row = self.db.execute(
            select(self.table)
            .where(c.guid == guid, c.restaurant_id == restaurant_id)
            .limit(1)
        ).mappings().first()
        return dict(row) if row else None

    def exists(self, guid: str) -> bool:
        c = self.table.c
        count = self.db.execute(
            select(func.count()).select_from(self.table).where(c.guid == guid)
        ).scalar()
        return bool(count)

    # -- writes ----------------------------------------------------------

    def insert(self, record: dict) -> None:
        """
        Insert one booking and commit.

        Keys unknown to the deployed schema are dropped. Raises
        DuplicateBookingId when the guid is already taken; any other
        failure propagates after rollback.
        """
        data = {k: v for k, v in record.items() if k in self.table.c}
        try:
            self.db.execute(self.table.insert().values(**data))
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            guid = data.get("guid")
            if guid and self.exists(guid):
                raise DuplicateBookingId(guid) from exc
            raise
        except Exception:
            self.db.rollback()
            raise

    def update(self, guid: str, fields: dict) -> None:
        data = {k: v for k, v in fields.items() if k in self.table.c}
        if not data:
            return
        try:
            self.db.execute(
                self.table.update().where(self.table.c.guid == guid).values(**data)
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


def _truthy(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return bool(value)
