"""
报价请求相关数据库模型
"""

from datetime import datetime

from sqlalchemy import Column, String, Integer, Numeric, Text, DateTime, ForeignKey
from printshop.core.database import Base


class QuoteRequestDB(Base):
    """报价请求数据库表"""

    __tablename__ = "quote_requests"

    # 主键和编号
    quote_id = Column(String(50), primary_key=True, comment="报价ID")
    quote_number = Column(String(20), nullable=False, unique=True, comment="报价编号")
    product_id = Column(String(50), index=True, comment="关联商品ID")

    # 客户信息
    name = Column(String(200), nullable=False, comment="客户姓名")
    email = Column(String(255), nullable=False, index=True, comment="客户邮箱")
    phone = Column(String(50), comment="客户电话")
    message = Column(Text, comment="客户留言")

    # 上传文件
    file_name = Column(String(255), comment="文件名")
    file_url = Column(String(1024), comment="文件地址")
    file_size = Column(Integer, comment="文件大小(字节)")

    # 报价状态
    status = Column(String(20), nullable=False, default="pending", index=True, comment="报价状态")
    quoted_price = Column(Numeric(10, 2), comment="报价金额")
    admin_notes = Column(Text, comment="管理员备注")
    user_response = Column(Text, comment="客户回复(旧字段)")

    # 报价时附带的优惠券快照
    coupon_id = Column(String(50), comment="优惠券ID快照")
    coupon_code = Column(String(50), comment="优惠券代码快照")
    coupon_type = Column(String(20), comment="优惠券类型快照")
    coupon_value = Column(Numeric(10, 2), comment="优惠券面值快照")
    coupon_currency = Column(String(3), comment="优惠券币种快照")

    # 时间戳
    viewed_at = Column(DateTime, comment="客户首次查看报价时间")
    quoted_at = Column(DateTime, comment="报价时间")
    created_at = Column(DateTime, default=datetime.now, index=True, comment="创建时间")
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, comment="更新时间")

    __table_args__ = (
        {'comment': '报价请求表'}
    )


class QuoteMessageDB(Base):
    """报价对话记录表，只追加不修改"""

    __tablename__ = "quote_messages"

    message_id = Column(Integer, primary_key=True, autoincrement=True, comment="消息ID")
    quote_id = Column(String(50), ForeignKey("quote_requests.quote_id"), nullable=False, index=True, comment="报价ID")
    sender_type = Column(String(10), nullable=False, comment="发送方 admin/user")
    message = Column(Text, nullable=False, comment="纯文本或JSON结构化消息")
    quoted_price = Column(Numeric(10, 2), comment="报价金额快照")
    created_at = Column(DateTime, default=datetime.now, nullable=False, comment="创建时间")

    __table_args__ = (
        {'comment': '报价对话记录表'}
    )
