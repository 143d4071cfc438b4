import logging
import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class WebhookDeduplicator:
    """
    Remembers (payment id, order status) pairs that were already relayed so a
    redelivered notification does not hit the order service again.
    Disabled when Redis is unavailable or the TTL is 0.
    """

    KEY_PREFIX = "mercadopago:webhook"

    def __init__(self, redis_client: redis.Redis | None, ttl_seconds: int):
        self.redis = redis_client
        self.ttl = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self.redis is not None and self.ttl > 0

    def _key(self, payment_id: str, status: str) -> str:
        return f"{self.KEY_PREFIX}:{payment_id}:{status}"

    async def claim(self, payment_id: str, status: str) -> bool:
        """Returns False when the same pair was claimed within the TTL."""
        if not self.enabled:
            return True
        try:
            claimed = await self.redis.set(self._key(payment_id, status), "1", nx=True, ex=self.ttl)
            return bool(claimed)
        except RedisError as e:
            logger.warning(f"Dedup claim failed for payment {payment_id}, processing anyway: {e}")
            return True

    async def release(self, payment_id: str, status: str) -> None:
        if not self.enabled:
            return
        try:
            await self.redis.delete(self._key(payment_id, status))
        except RedisError as e:
            logger.warning(f"Dedup release failed for payment {payment_id}: {e}")
