"""
商品数据库模型 (只读协作方)
"""

from datetime import datetime

from sqlalchemy import Column, String, Numeric, Boolean, DateTime
from printshop.core.database import Base


class ProductDB(Base):
    """商品数据库表"""

    __tablename__ = "products"

    product_id = Column(String(50), primary_key=True, comment="商品ID")
    slug = Column(String(200), nullable=False, unique=True, comment="URL标识")

    # 多语言名称
    name_bg = Column(String(300), comment="名称(保加利亚语)")
    name_en = Column(String(300), nullable=False, comment="名称(英语)")
    name_es = Column(String(300), comment="名称(西班牙语)")

    # 价格信息
    price = Column(Numeric(10, 2), comment="标价")
    sale_price = Column(Numeric(10, 2), comment="促销价")
    on_sale = Column(Boolean, nullable=False, default=False, comment="是否促销")
    currency = Column(String(3), nullable=False, default="EUR", comment="币种")

    published = Column(Boolean, nullable=False, default=True, comment="是否上架")
    created_at = Column(DateTime, default=datetime.now, comment="创建时间")

    __table_args__ = (
        {'comment': '商品表'}
    )
