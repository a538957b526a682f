from sqlalchemy import Column, ForeignKey, Index, Integer, Text, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Restaurant(Base):
    __tablename__ = 'restaurant'

    guid = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False, server_default=text("''"))
    id = Column(Integer, primary_key=True)

    config = relationship('RestaurantConfig', back_populates='restaurant', uselist=False)
    bookings = relationship('Booking', back_populates='restaurant')


class RestaurantConfig(Base):
    __tablename__ = 'restaurant_config'

    restaurant_id = Column(ForeignKey('restaurant.id', ondelete='CASCADE'), nullable=False, unique=True)
    id = Column(Integer, primary_key=True)
    booking_step = Column(Integer)
    max_booking_by_step = Column(Integer)
    booking_step_table_count = Column(Integer)
    today_booking_noon_max_hour = Column(Text)
    today_booking_evening_max_hour = Column(Text)

    restaurant = relationship('Restaurant', back_populates='config')


class Booking(Base):
    __tablename__ = 'booking'
    __table_args__ = (
        Index('ix_booking_slot', 'restaurant_id', 'date', 'hour'),
    )

    guid = Column(Text, nullable=False, unique=True)
    restaurant_id = Column(ForeignKey('restaurant.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(Text, nullable=False)
    tableware_count = Column(Integer, nullable=False)
    date = Column(Text, nullable=False)
    hour = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    email = Column(Text)
    phone_number = Column(Text)
    source = Column(Text)
    annulation = Column(Integer, nullable=False, server_default=text('0'))
    refuse = Column(Integer, nullable=False, server_default=text('0'))
    sending_sms = Column(Integer, nullable=False)
    remind_sms = Column(Integer, nullable=False)
    is_waiting = Column(Integer, nullable=False)
    confirmed = Column(Integer, nullable=False)
    created_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, server_default=text('CURRENT_TIMESTAMP'))

    restaurant = relationship('Restaurant', back_populates='bookings')
