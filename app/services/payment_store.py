import logging
from typing import Optional
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StorageError
from app.db.models.payment import Payment, PaymentStatus

logger = logging.getLogger(__name__)


class PaymentStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, payment: Payment) -> Payment:
        try:
            self.db.add(payment)
            await self.db.commit()
            await self.db.refresh(payment)
            return payment
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Could not save payment for order {payment.order_id}: {e}") from e

    async def get(self, payment_id: int) -> Optional[Payment]:
        try:
            return await self.db.get(Payment, payment_id)
        except SQLAlchemyError as e:
            raise StorageError(f"Could not read payment {payment_id}: {e}") from e

    async def mark_terminal(self, order_id: str, status: PaymentStatus) -> int:
        """
        Moves the Pending payments of an order to a terminal status.
        Records already in Success or Failed are never touched.
        Returns the number of records updated.
        """
        if status == PaymentStatus.PENDING:
            raise ValueError("mark_terminal expects Success or Failed")

        stmt = (
            update(Payment)
            .where(Payment.order_id == order_id, Payment.status == PaymentStatus.PENDING)
            .values(status=status)
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
            return result.rowcount
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"Could not update payment status for order {order_id}: {e}") from e
