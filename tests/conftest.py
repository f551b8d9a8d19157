import pytest
from sqlalchemy import create_engine, event, func, select
from sqlalchemy.pool import StaticPool

from order_service.clients.catalog import CatalogClient
from order_service.db.models import Order, OrderItem
from order_service.db.session import Base, build_session_factory
from tests.fakes import G1, G2, G3, FakeCatalog


@pytest.fixture
def engine():
    """A fresh in-memory store per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def fake_catalog():
    return FakeCatalog({
        G1: ("Game One", "10.00"),
        G2: ("Game Two", "5.00"),
        G3: ("Game Three", "19.99"),
    })


@pytest.fixture
def catalog(fake_catalog):
    client = CatalogClient("http://catalog.test", transport=fake_catalog.transport())
    yield client
    client.close()


@pytest.fixture
def row_counts(session_factory):
    def _counts():
        with session_factory() as db:
            orders = db.execute(select(func.count()).select_from(Order)).scalar_one()
            items = db.execute(select(func.count()).select_from(OrderItem)).scalar_one()
        return orders, items
    return _counts
