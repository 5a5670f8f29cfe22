"""
商品数据库操作层 (只读)
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.config.message_catalog import localize_field
from printshop.models.product import ProductRef
from printshop.models.database.product_db import ProductDB


class ProductRepository:
    """商品数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_product_id(self, product_id: str) -> Optional[ProductDB]:
        """根据商品ID获取商品"""
        result = await self.db.execute(
            select(ProductDB).where(ProductDB.product_id == product_id)
        )
        return result.scalar_one_or_none()

    async def get_by_product_ids(self, product_ids: List[str]) -> List[ProductDB]:
        """批量获取商品"""
        if not product_ids:
            return []
        result = await self.db.execute(
            select(ProductDB).where(ProductDB.product_id.in_(product_ids))
        )
        return list(result.scalars().all())

    def to_ref(self, db_product: ProductDB, locale: Optional[str] = None) -> Optional[ProductRef]:
        """转换为优惠券计算用的商品引用，无标价的商品返回None"""
        if db_product.price is None:
            return None
        return ProductRef(
            product_id=db_product.product_id,
            price=db_product.price,
            sale_price=db_product.sale_price,
            on_sale=bool(db_product.on_sale),
            currency=db_product.currency or "EUR",
            published=bool(db_product.published),
            name=localize_field(db_product, "name", locale)
        )
