"""
测试配置文件 - pytest fixtures和共用配置
"""

import uuid
import pytest
import pytest_asyncio
from decimal import Decimal
from datetime import datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from printshop.core.database import Base
from printshop.models.database import CouponDB, ProductDB, QuoteRequestDB, UserDB
from printshop.repositories.coupon_repository import CouponRepository
from printshop.repositories.notification_repository import NotificationRepository
from printshop.repositories.product_repository import ProductRepository
from printshop.repositories.quote_repository import QuoteRepository
from printshop.services.coupon_service import CouponService
from printshop.services.notification_service import NotificationService
from printshop.services.quote_service import QuoteService


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """测试数据库引擎 - 内存SQLite，每个测试独立"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_db_engine) -> AsyncSession:
    """测试数据库会话"""
    session_maker = async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with session_maker() as session:
        yield session


class StubFileStorage:
    """记录保存请求的附件存储"""

    def __init__(self):
        self.saved = []

    async def save(self, filename: str, content: bytes) -> str:
        self.saved.append((filename, len(content)))
        return f"/uploads/quotes/{filename}"


@pytest.fixture
def file_storage():
    return StubFileStorage()


@pytest.fixture
def quote_service(db_session, file_storage):
    """基于真实仓储的报价服务"""
    coupon_service = CouponService(CouponRepository(db_session), ProductRepository(db_session))
    return QuoteService(
        quote_repo=QuoteRepository(db_session),
        coupon_service=coupon_service,
        notification_service=NotificationService(NotificationRepository(db_session)),
        file_storage=file_storage
    )


@pytest.fixture
def coupon_service(db_session):
    return CouponService(CouponRepository(db_session), ProductRepository(db_session))


@pytest.fixture
def make_product(db_session):
    """创建商品"""

    async def _make(product_id="prod_001", price=Decimal("100.00"), sale_price=None, on_sale=False, currency="EUR", published=True):
        product = ProductDB(
            product_id=product_id,
            slug=f"slug-{product_id}",
            name_bg="Ваза",
            name_en="Vase",
            name_es="Jarrón",
            price=price,
            sale_price=sale_price,
            on_sale=on_sale,
            currency=currency,
            published=published
        )
        db_session.add(product)
        await db_session.commit()
        return product

    return _make


@pytest.fixture
def make_coupon(db_session):
    """创建优惠券"""

    async def _make(code="SAVE10", coupon_type="percentage", value=Decimal("10.00"), **overrides):
        values = {
            "coupon_id": f"coupon_{uuid.uuid4().hex[:8]}",
            "code": code,
            "coupon_type": coupon_type,
            "value": value,
            "currency": None,
            "min_purchase": None,
            "max_uses": None,
            "per_user_limit": None,
            "product_ids": [],
            "allow_on_sale": False,
            "show_on_product": False,
            "active": True,
            "starts_at": datetime.now() - timedelta(days=1),
            "expires_at": datetime.now() + timedelta(days=30),
        }
        values.update(overrides)
        coupon = CouponDB(**values)
        db_session.add(coupon)
        await db_session.commit()
        return coupon

    return _make


@pytest.fixture
def make_user(db_session):
    """创建注册用户"""

    async def _make(email="maria@example.com", user_id="user_001"):
        user = UserDB(user_id=user_id, email=email, name="Maria", locale="bg")
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_quote(db_session):
    """直接写入指定状态的报价"""

    async def _make(quote_id=None, status="pending", email="maria@example.com", quoted_price=None, **overrides):
        quote_id = quote_id or f"quote_{uuid.uuid4().hex[:8]}"
        quote = QuoteRequestDB(
            quote_id=quote_id,
            quote_number=f"QUO-{quote_id[-4:].upper()}@D4D",
            name="Maria",
            email=email,
            status=status,
            quoted_price=quoted_price,
            **overrides
        )
        db_session.add(quote)
        await db_session.commit()
        return quote

    return _make
