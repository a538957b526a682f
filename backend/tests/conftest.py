from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reserve_api.models import Base, Booking, Restaurant, RestaurantConfig

PARIS = ZoneInfo("Europe/Paris")

MERCHANT_GUID = "6f1c2a9e-merchant-0001"
OTHER_GUID = "0b7d4e21-merchant-0002"

# Fixed "now" for every test that depends on the current day
NOW = datetime(2025, 8, 12, 10, 0, tzinfo=PARIS)


@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same DB
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def restaurant(db) -> Restaurant:
    obj = Restaurant(guid=MERCHANT_GUID, name="Chez Test")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def other_restaurant(db) -> Restaurant:
    obj = Restaurant(guid=OTHER_GUID, name="Autre Table")
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def configure(db):
    """configure(restaurant, max_booking_by_step=2, ...) -> RestaurantConfig"""

    def _configure(restaurant: Restaurant, **fields) -> RestaurantConfig:
        cfg = RestaurantConfig(restaurant_id=restaurant.id, **fields)
        db.add(cfg)
        db.commit()
        return cfg

    return _configure


@pytest.fixture
def add_booking(db):
    """add_booking(restaurant, "2025-08-20", "12:00", annulation=1, ...) -> Booking"""
    counter = {"n": 0}

    def _add(restaurant: Restaurant, day: str, hour: str, **fields) -> Booking:
        counter["n"] += 1
        values = {
            "guid": f"SEED_{counter['n']:04d}",
            "name": "Seed Client",
            "tableware_count": 2,
            "sending_sms": 0,
            "remind_sms": 0,
            "is_waiting": 0,
            "confirmed": 1,
        }
        values.update(fields)
        obj = Booking(restaurant_id=restaurant.id, date=day, hour=hour, **values)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    return _add
