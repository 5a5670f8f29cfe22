"""
商品数据模型 (优惠券计算所需的最小视图)
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class ProductRef(BaseModel):
    """优惠券校验使用的商品引用"""

    product_id: str = Field(..., description="商品ID")
    price: Decimal = Field(..., ge=0, description="标价")
    sale_price: Optional[Decimal] = Field(None, ge=0, description="促销价")
    on_sale: bool = Field(default=False, description="是否促销")
    currency: str = Field(default="EUR", description="币种")
    name: Optional[str] = Field(None, description="当前语言下的商品名称")
    published: bool = Field(default=True, description="是否上架")

    @property
    def is_on_sale(self) -> bool:
        """促销标记且有促销价才算促销中"""
        return self.on_sale and self.sale_price is not None

    @property
    def effective_price(self) -> Decimal:
        """当前实际售价"""
        if self.is_on_sale:
            return self.sale_price
        return self.price
