import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from app.db.models.payment import Payment, PaymentStatus
from app.db.session import Base, build_sessionmaker
from app.services.payment_store import PaymentStore


@pytest_asyncio.fixture
async def store(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payments.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with build_sessionmaker(engine)() as session:
        yield PaymentStore(session)

    await engine.dispose()


def _payment(order_id="ord1", amount=300):
    return Payment(
        order_id=order_id,
        client_id="client1",
        products=[{"id": "p1", "name": "X-Burger", "unitPrice": 100}, {"id": "p2", "name": "Fries", "unitPrice": 200}],
        amount=amount,
        status=PaymentStatus.PENDING,
        qr_code="qr-data",
    )


@pytest.mark.asyncio
async def test_create_and_get(store):
    created = await store.create(_payment())

    loaded = await store.get(created.id)

    assert loaded is not None
    assert loaded.order_id == "ord1"
    assert loaded.amount == 300
    assert loaded.status == PaymentStatus.PENDING
    assert loaded.products[1]["unitPrice"] == 200
    assert loaded.created_at is not None


@pytest.mark.asyncio
async def test_get_unknown_id(store):
    assert await store.get(999) is None


@pytest.mark.asyncio
async def test_terminal_status_is_sticky(store):
    created = await store.create(_payment())

    assert await store.mark_terminal("ord1", PaymentStatus.SUCCESS) == 1
    assert await store.mark_terminal("ord1", PaymentStatus.FAILED) == 0

    store.db.expire_all()
    loaded = await store.get(created.id)
    assert loaded.status == PaymentStatus.SUCCESS


@pytest.mark.asyncio
async def test_mark_terminal_rejects_pending(store):
    with pytest.raises(ValueError):
        await store.mark_terminal("ord1", PaymentStatus.PENDING)
