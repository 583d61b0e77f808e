"""
Pytest fixtures for promo_basket backend tests.

Provides test database setup, catalog/promotion factories, a shopper
context and the test client.
"""

import pytest
from promo_basket import create_app
from promo_basket.config import Config
from promo_basket.context import make_context
from promo_basket.extensions import db
from promo_basket.models import (
    Article,
    BasketFreeGoodLink,
    BasketLine,
    BasketLineAttribute,
    Promotion,
    PromotionFreeGood,
    Shop,
    Voucher,
    VoucherCode,
)
from promo_basket.models.basket import MODE_ARTICLE
from promo_basket.records import AppliedPromotions


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOCALE = "en_GB"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def shop(db_session):
    shop = Shop(name="Main Shop", currency_factor=1.0)
    db_session.add(shop)
    db_session.commit()
    return shop


@pytest.fixture(scope='function')
def ctx(db_session, shop):
    """Shopper context of a guest in the default customer group."""
    return make_context("session-a", shop_id=shop.id, customer_group_id=1)


@pytest.fixture(scope='function')
def make_article(db_session):
    def _make(order_number, price_cents=1000, tax_rate_bps=1900, in_stock=10, last_stock=False, name=None):
        article = Article(
            order_number=order_number,
            name=name or f"Article {order_number}",
            price_cents=price_cents,
            net_price_cents=round(price_cents * 10000 / (10000 + tax_rate_bps)),
            tax_rate_bps=tax_rate_bps,
            in_stock=in_stock,
            last_stock=last_stock,
        )
        db_session.add(article)
        db_session.commit()
        return article
    return _make


@pytest.fixture(scope='function')
def make_promotion(db_session):
    def _make(name, promo_type, free_goods=(), voucher=None, **fields):
        promo = Promotion(name=name, promo_type=promo_type, voucher_id=voucher.id if voucher else None, **fields)
        db_session.add(promo)
        db_session.flush()
        for article in free_goods:
            db_session.add(PromotionFreeGood(promotion_id=promo.id, article_id=article.id))
        db_session.commit()
        return promo
    return _make


@pytest.fixture(scope='function')
def make_voucher(db_session):
    def _make(description="Voucher", code=None, mode=0, codes=()):
        voucher = Voucher(description=description, voucher_code=code, mode=mode)
        db_session.add(voucher)
        db_session.flush()
        for individual in codes:
            db_session.add(VoucherCode(voucher_id=voucher.id, code=individual))
        db_session.commit()
        return voucher
    return _make


@pytest.fixture(scope='function')
def add_line(db_session):
    """Insert a basket line directly, bypassing the basket service and its hooks."""
    def _add(ctx, order_number="SW-1", price_cents=1000, quantity=1, mode=MODE_ARTICLE,
             promotion_id=None, free_good_promotion_ids=(), article_id=1, tax_rate_bps=1900):
        line = BasketLine(
            session_id=ctx.session_id,
            article_id=article_id,
            article_name=order_number,
            order_number=order_number,
            quantity=quantity,
            price_cents=price_cents,
            net_price_cents=round(price_cents * 10000 / (10000 + tax_rate_bps)),
            tax_rate_bps=tax_rate_bps,
            mode=mode,
        )
        db_session.add(line)
        db_session.flush()
        db_session.add(BasketLineAttribute(basket_line_id=line.id, promotion_id=promotion_id))
        for position, pid in enumerate(free_good_promotion_ids):
            db_session.add(BasketFreeGoodLink(basket_line_id=line.id, promotion_id=pid, position=position))
        db_session.commit()
        return line
    return _add


class RecordingSelector:
    """Selector double: counts runs and returns what the test configured."""

    def __init__(self):
        self.calls = []
        self.on_apply = None

    def apply(self, basket, customer_group_id, customer_id, shop_id, voucher_ids):
        self.calls.append({
            "session_id": basket.session_id,
            "customer_group_id": customer_group_id,
            "customer_id": customer_id,
            "shop_id": shop_id,
            "voucher_ids": list(voucher_ids),
        })
        if self.on_apply is not None:
            return self.on_apply(basket)
        return AppliedPromotions(basket=basket)


@pytest.fixture(scope='function')
def recording_selector(app):
    """Swap the reconciler's selector for a RecordingSelector during one test."""
    adapter = app.extensions["basket_reconciler"].adapter
    original = adapter.selector
    selector = RecordingSelector()
    adapter.selector = selector
    yield selector
    adapter.selector = original
