import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, Numeric, JSON, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from app.db.session import Base

class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"

class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("idx_payments_order_status", "order_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String, index=True, nullable=False)
    client_id = Column(String, nullable=False)

    products = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)

    status = Column(
        Enum(PaymentStatus, values_callable=lambda e: [m.value for m in e]),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )

    qr_code = Column(String, nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now(),
    )

    def __repr__(self):
        return (
            f"<Payment(id={self.id}, order={self.order_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
