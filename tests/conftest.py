"""
Test configuration and fixtures.
Uses SQLite in-memory for the log and options tables; store collaborators are fakes.
"""
import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

import fraud_orders.models  # noqa: F401
from fraud_orders.config import Settings
from fraud_orders.database import Base
from fraud_orders.integrations.store_base import NoticeQueue, OrderBase
from fraud_orders.schemas.customer import CustomerRecord
from fraud_orders.services.options import MemoryOptionStore


class FakeOrder(OrderBase):
    """Order double recording every status change and note."""

    def __init__(self, status: str = "processing", order_type: str = "shop_order", order_id: int = 101):
        self.id = order_id
        self.status = status
        self.order_type = order_type
        self.notes: list[str] = []
        self.status_changes: list[tuple[str, str]] = []

    def has_status(self, status: str) -> bool:
        return self.status == status

    def update_status(self, status: str, note: str = "") -> None:
        self.status = status
        self.status_changes.append((status, note))

    def add_note(self, text: str) -> None:
        self.notes.append(text)

    def get_type(self) -> str:
        return self.order_type

    def get_checkout_payment_url(self) -> str:
        return f"https://shop.example/checkout/order-pay/{self.id}/?pay_for_order=true"


@pytest.fixture
async def db():
    """In-memory SQLite database for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def settings(tmp_path):
    """Settings with the debug log pointed at a temp directory."""
    return Settings(log_dir=str(tmp_path / "wmfo-logs"))


@pytest.fixture
def store():
    return MemoryOptionStore()


@pytest.fixture
def notices():
    return NoticeQueue()


@pytest.fixture
def order():
    return FakeOrder()


@pytest.fixture
def make_order():
    """The order double class, for tests needing custom status or type."""
    return FakeOrder


@pytest.fixture
def sample_customer():
    """A complete customer with identical billing and shipping addresses."""
    return CustomerRecord(
        full_name="John Smith",
        ip_address="203.0.113.7",
        billing_phone="+15125559876",
        billing_email="john@example.com",
        billing_address=["1 Main St", "", "Austin", "TX", "78701", "US"],
        shipping_address=["1 Main St", "", "Austin", "TX", "78701", "US"],
    )
