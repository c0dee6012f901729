import pytest
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from voltedge.core.notifications import ToastQueue
from voltedge.db.base import Base
from voltedge.db.models import CartSlot
from voltedge.schemas.product import ProductSnapshot
from voltedge.services.cart import CartStore
from voltedge.services.cart_storage import MemoryCartStorage


DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture
def engine():
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def product_factory():
    def make_product(product_id="p1", price="10", name=None, **extra) -> ProductSnapshot:
        return ProductSnapshot(
            id=product_id,
            name=name or f"Product {product_id}",
            price=Decimal(price),
            **extra
        )
    return make_product


@pytest.fixture
def laptop(product_factory):
    return product_factory(
        "lap-1",
        price="1299.99",
        name="VoltEdge Pro Laptop",
        description="14-inch ultrabook",
        stock=12,
        sku="VE-LAP-14",
        low_stock_threshold=3,
        category_id="cat-laptops",
        images=[{"url": "/images/laptop.png", "altText": "Laptop"}],
    )


@pytest.fixture
def headphones(product_factory):
    return product_factory("hp-1", price="249.99", name="VoltEdge Noise-Cancelling Headphones")


@pytest.fixture
def storage():
    return MemoryCartStorage()


@pytest.fixture
def toasts():
    return ToastQueue()


@pytest.fixture
def store(storage, toasts):
    return CartStore.open(storage, toasts)
