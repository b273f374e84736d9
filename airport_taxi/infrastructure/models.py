"""
SQLAlchemy ORM models.

Tables
------
* ``orders`` -- every booking, one row per ``Order`` aggregate

Indexes
-------
* **Unique** on ``generated_id`` -- the 4-digit booking reference.
* **B-Tree** on ``status`` for the reminder sweeps, and on ``date`` for the
  operator list ordering.

Columns stay portable (no PostgreSQL-only types) so the same model runs on
SQLite in tests.
"""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)

from airport_taxi.infrastructure.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Uuid(as_uuid=False), primary_key=True)
    generated_id = Column(String(4), nullable=False)

    status = Column(String(16), nullable=False, default="pending")
    car_type = Column(Integer, nullable=False)
    pickup_address = Column(String(255), nullable=False)
    proposed_price = Column(String(32), nullable=False)
    date = Column(Date, nullable=False)
    pickup_time = Column(String(5), nullable=False)
    flight_number = Column(String(32), nullable=False)
    full_name = Column(String(255), nullable=False)
    email_address = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=False)
    additional_notes = Column(Text, nullable=False, default="")
    locale = Column(String(2), nullable=False, default="en")

    pending_price = Column(String(32), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # Capability tokens
    confirmation_token = Column(String(64), nullable=True)
    customer_access_token = Column(String(64), nullable=True)
    price_proposal_token = Column(String(64), nullable=True)

    # One-way reminder stamps, naive local time
    completion_reminder_sent_at = Column(DateTime(timezone=False), nullable=True)
    customer_reminder_sent_at = Column(DateTime(timezone=False), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("uniq_orders_generated_id", "generated_id", unique=True),
        Index("idx_orders_status", "status"),
        Index("idx_orders_date", "date"),
    )
