from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Integer, MetaData, String, Table

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("login", String(50), nullable=False, unique=True),
    Column("created_at", String, nullable=False),
)

# date_time columns hold fixed-width UTC ISO-8601 strings so they sort lexically.
weights = Table(
    "weights",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("date_time", String, nullable=False),
    Column("value", Float, nullable=False),
    Column("user_id", Integer, ForeignKey("users.id")),
)

blood_pressures = Table(
    "blood_pressures",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("date_time", String, nullable=False),
    Column("systolic", Integer, nullable=False),
    Column("diastolic", Integer, nullable=False),
    Column("user_id", Integer, ForeignKey("users.id")),
)
