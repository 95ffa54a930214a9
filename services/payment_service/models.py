from sqlalchemy import Column, DateTime, Integer, JSON, String
from sqlalchemy.sql import func

from shared.config.database import Base


class PaymentIntent(Base):
    __tablename__ = "payment_intents"

    id = Column(String, primary_key=True, index=True) # pi_<hex>
    amount = Column(Integer, nullable=False) # minor currency units
    currency = Column(String(3), nullable=False)
    payment_method = Column(String, nullable=False)
    status = Column(String, nullable=False) # succeeded, requires_payment_method, refunded
    client_secret = Column(String, nullable=False)
    last_payment_error = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
