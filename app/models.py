import uuid
from datetime import datetime

from sqlalchemy import Column, String, Numeric, Date, DateTime, UniqueConstraint

from app.database import Base


def new_uuid():
    return str(uuid.uuid4())


class ExchangeRate(Base):
    """Cached rate_to_base: units of base_currency per 1 unit of from_currency."""

    __tablename__ = "exchange_rates"

    id = Column(String, primary_key=True, default=new_uuid)
    date = Column(Date, nullable=False)
    from_currency = Column(String(3), nullable=False)
    base_currency = Column(String(3), nullable=False)
    rate_to_base = Column(Numeric(18, 8), nullable=False)
    fetched_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("date", "from_currency", "base_currency"),)
