"""
店铺数据库表创建脚本

用法: python -m scripts.create_tables [--sample]
"""

import asyncio
import sys
from decimal import Decimal
from datetime import datetime, timedelta

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from printshop.core.config import settings
from printshop.core.database import Base

# 导入所有数据库模型以确保表被注册
from printshop.models.database import CouponDB, ProductDB


async def create_database_if_not_exists():
    """创建数据库（如果不存在）"""
    server_url = settings.database_url_computed.replace(f"/{settings.db_name}", "/postgres")
    engine = create_async_engine(server_url, isolation_level="AUTOCOMMIT")

    async with engine.connect() as conn:
        result = await conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :db_name"),
            {"db_name": settings.db_name}
        )
        if not result.fetchone():
            await conn.execute(text(f'CREATE DATABASE "{settings.db_name}"'))
            print(f"数据库 '{settings.db_name}' 创建成功")
        else:
            print(f"数据库 '{settings.db_name}' 已存在")

    await engine.dispose()


async def create_tables():
    """创建所有数据表和额外索引"""
    engine = create_async_engine(settings.database_url_computed)

    indexes = [
        # 管理员报价队列
        "CREATE INDEX IF NOT EXISTS idx_quote_requests_status_created ON quote_requests(status, created_at DESC);",
        # 对话记录按时间读取
        "CREATE INDEX IF NOT EXISTS idx_quote_messages_quote_time ON quote_messages(quote_id, created_at, message_id);",
        # 单用户使用次数统计
        "CREATE INDEX IF NOT EXISTS idx_coupon_usages_coupon_email ON coupon_usages(coupon_id, email);",
        # 旧报价优惠券回查
        "CREATE INDEX IF NOT EXISTS idx_notifications_quote_coupon ON notifications(quote_id, coupon_id);",
    ]

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        print("所有数据表创建成功")
        for index_sql in indexes:
            await conn.execute(text(index_sql))
        print("所有索引创建成功")

    await engine.dispose()


async def insert_sample_data():
    """插入示例商品和优惠券"""
    engine = create_async_engine(settings.database_url_computed)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    now = datetime.now()

    products = [
        ProductDB(
            product_id="vase_spiral", slug="spiral-vase",
            name_bg="Спирална ваза", name_en="Spiral vase", name_es="Jarrón espiral",
            price=Decimal("24.90"), currency="EUR"
        ),
        ProductDB(
            product_id="phone_stand", slug="phone-stand",
            name_bg="Стойка за телефон", name_en="Phone stand", name_es="Soporte para móvil",
            price=Decimal("12.00"), sale_price=Decimal("9.50"), on_sale=True, currency="EUR"
        ),
    ]
    coupons = [
        CouponDB(
            coupon_id="welcome_10", code="WELCOME10", coupon_type="percentage", value=Decimal("10"),
            per_user_limit=1, product_ids=[], show_on_product=True,
            starts_at=now, expires_at=now + timedelta(days=90)
        ),
        CouponDB(
            coupon_id="vase_5", code="VASE5", coupon_type="fixed", value=Decimal("5"), currency="EUR",
            min_purchase=Decimal("20"), product_ids=["vase_spiral"], show_on_product=True,
            starts_at=now, expires_at=now + timedelta(days=30)
        ),
    ]

    async with session_maker() as session:
        for entity in products + coupons:
            await session.merge(entity)
            print(f"写入示例数据: {getattr(entity, 'slug', None) or entity.code}")
        await session.commit()

    await engine.dispose()


async def main():
    await create_database_if_not_exists()
    await create_tables()
    if "--sample" in sys.argv:
        await insert_sample_data()


if __name__ == "__main__":
    asyncio.run(main())
