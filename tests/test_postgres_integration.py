import os
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine, func, inspect, select, text
from sqlalchemy.orm import sessionmaker

import stockroom.models  # noqa: F401
from stockroom.core.errors import InsufficientStock
from stockroom.db.base import Base
from stockroom.models.category import Category
from stockroom.models.product import Product
from stockroom.models.stock_movement import StockMovement
from stockroom.services import inventory_service


def _test_pg_url() -> str | None:
    return os.getenv("TEST_POSTGRES_DATABASE_URL")


@pytest.fixture()
def pg_session_local():
    url = _test_pg_url()
    if not url:
        pytest.skip("Set TEST_POSTGRES_DATABASE_URL to run Postgres integration tests.")

    engine = create_engine(url, pool_pre_ping=True, pool_size=10)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.mark.integration
def test_postgres_connection_and_core_tables(pg_session_local):
    engine = pg_session_local.kw["bind"]
    with engine.connect() as conn:
        assert conn.execute(text("SELECT 1")).scalar_one() == 1

    table_names = set(inspect(engine).get_table_names())
    assert {"users", "categories", "products", "stock_movements"} <= table_names


@pytest.mark.integration
def test_concurrent_stock_out_loses_no_updates(pg_session_local):
    db = pg_session_local()
    try:
        category = Category(name="Electronics")
        db.add(category)
        db.flush()
        product = Product(category_id=category.id, name="Headphones", sku="ELC-001", price=100, quantity=50)
        db.add(product)
        db.commit()
        product_id = product.id
    finally:
        db.close()

    def take_one(_):
        session = pg_session_local()
        try:
            inventory_service.stock_out(session, product_id, 1)
            return True
        except InsufficientStock:
            return False
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(take_one, range(60)))

    assert outcomes.count(True) == 50
    assert outcomes.count(False) == 10

    db = pg_session_local()
    try:
        assert db.execute(select(Product.quantity).where(Product.id == product_id)).scalar_one() == 0
        assert db.execute(select(func.count(StockMovement.id))).scalar_one() == 50
    finally:
        db.close()
