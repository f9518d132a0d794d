# gaadiyaan/models.py
"""SQLAlchemy ORM models for persisted entities.

`VehicleListing` keeps its structured attributes (specifications, features,
images) as JSON text; encoding and decoding them is the job of `mapper.py`.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, Index

from .db import Base

FUEL_TYPES = ("petrol", "diesel", "cng", "electric", "hybrid")
TRANSMISSIONS = ("manual", "automatic")
USER_ROLES = ("client", "dealer", "admin")

# bounds of the Integer and Numeric(12, 2) columns
INT_MIN, INT_MAX = -2**31, 2**31 - 1
PRICE_MAX = 9_999_999_999.99


def utcnow():
    return datetime.now(timezone.utc)


class VehicleListing(Base):
    __tablename__ = "vehicle_listings"
    id = Column(Integer, primary_key=True, index=True)
    dealer_id = Column(String(16), nullable=False, index=True)
    car_title = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    year = Column(Integer, nullable=False)
    description = Column(Text)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    registration_year = Column(Integer, nullable=False)
    insurance = Column(String(100), nullable=False)
    fuel_type = Column(String(16), nullable=False)
    seats = Column(Integer, nullable=False)
    kms_driven = Column(Integer, nullable=False)
    location = Column(String(255), nullable=False)
    ownership = Column(String(20), nullable=False)
    engine_displacement = Column(Integer, nullable=False)
    transmission = Column(String(16), nullable=False)
    images = Column(Text)
    specifications = Column(Text)
    features = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def as_dict(self):
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


Index("idx_vehicle_listings_price", VehicleListing.price)
Index("idx_vehicle_listings_year", VehicleListing.year)
Index("idx_vehicle_listings_created_at", VehicleListing.created_at)


class DealerProfile(Base):
    __tablename__ = "dealer_info"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    dealership_name = Column(String(255))
    phone = Column(String(32))
    dealer_id = Column(String(16), index=True)
    business_address = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    pincode = Column(String(16))
    gst_number = Column(String(32))
    user_type = Column(String(20), nullable=False, default="dealer")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class DealerIdRegistration(Base):
    """Every dealer id handed out or claimed; the unique constraint is what
    keeps two writers from ending up with the same id."""
    __tablename__ = "dealer_ids"
    id = Column(Integer, primary_key=True)
    dealer_id = Column(String(16), nullable=False, unique=True)
    year = Column(Integer, nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    reserved_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="client")
    dealer_id = Column(String(16), index=True)
    full_name = Column(String(255))
    dealership_name = Column(String(255))
    phone = Column(String(32))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class CallbackRequest(Base):
    __tablename__ = "callbacks"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
