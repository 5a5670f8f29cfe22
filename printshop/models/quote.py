"""
报价请求相关数据模型
"""

from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class QuoteStatus(str, Enum):
    """报价存储状态枚举"""
    PENDING = "pending"  # 待报价 (含还价后重新排队)
    QUOTED = "quoted"  # 已报价，等待客户回复
    ACCEPTED = "accepted"  # 客户已接受
    REJECTED = "rejected"  # 管理员拒绝
    USER_DECLINED = "user_declined"  # 客户已拒绝


class DisplayStatus(str, Enum):
    """展示状态，counter_offer 由 pending + user_response 推导，不落库"""
    PENDING = "pending"
    QUOTED = "quoted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    USER_DECLINED = "user_declined"
    COUNTER_OFFER = "counter_offer"


def derive_display_status(status: str, user_response: Optional[str]) -> DisplayStatus:
    """所有展示位置统一使用的状态推导"""
    if status == QuoteStatus.PENDING.value and user_response is not None:
        return DisplayStatus.COUNTER_OFFER
    return DisplayStatus(status)


class QuoteAction(str, Enum):
    """客户可执行的回复动作"""
    ACCEPT = "accept"
    DECLINE = "decline"
    COUNTER_OFFER = "counter_offer"


class SenderType(str, Enum):
    """消息发送方"""
    ADMIN = "admin"
    USER = "user"


class QuoteRequest(BaseModel):
    """报价请求模型"""

    quote_id: str = Field(..., description="报价ID")
    quote_number: str = Field(..., description="报价编号")
    product_id: Optional[str] = Field(None, description="关联商品ID")
    name: str = Field(..., description="客户姓名")
    email: str = Field(..., description="客户邮箱")
    phone: Optional[str] = None
    message: Optional[str] = None
    file_name: Optional[str] = None
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    status: QuoteStatus = Field(default=QuoteStatus.PENDING, description="存储状态")
    quoted_price: Optional[Decimal] = Field(None, ge=0, description="报价金额")
    admin_notes: Optional[str] = None
    user_response: Optional[str] = None
    coupon_id: Optional[str] = None
    coupon_code: Optional[str] = None
    coupon_type: Optional[str] = None
    coupon_value: Optional[Decimal] = None
    coupon_currency: Optional[str] = None
    viewed_at: Optional[datetime] = None
    quoted_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def display_status(self) -> DisplayStatus:
        return derive_display_status(self.status.value, self.user_response)

    @property
    def has_coupon_snapshot(self) -> bool:
        return bool(self.coupon_code and self.coupon_type and self.coupon_value is not None)


class QuoteMessage(BaseModel):
    """报价对话消息"""

    message_id: int
    quote_id: str
    sender_type: SenderType
    message: str
    quoted_price: Optional[Decimal] = None
    created_at: datetime


class LocalizedQuoteMessage(BaseModel):
    """渲染后的对话消息"""

    message_id: int
    sender_type: SenderType
    lines: List[str]
    quoted_price: Optional[Decimal] = None
    created_at: datetime


class QuoteSubmission(BaseModel):
    """公开报价表单提交"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    product_id: Optional[str] = None


class QuoteAttachment(BaseModel):
    """报价附带的3D模型文件"""

    filename: str
    content: bytes = b""
    # 超过上限的上传不保留内容，只记录读取到的大小
    declared_size: Optional[int] = None

    @property
    def size(self) -> int:
        if self.declared_size is not None:
            return self.declared_size
        return len(self.content)

    @property
    def extension(self) -> str:
        dot = self.filename.rfind(".")
        if dot < 0:
            return ""
        return self.filename[dot:].lower()


class QuoteSubmitResult(BaseModel):
    """提交结果"""

    quote_id: str
    quote_number: str


class AdminQuoteUpdate(BaseModel):
    """管理员更新报价"""

    status: QuoteStatus = Field(..., description="目标状态")
    quoted_price: Optional[Decimal] = Field(None, description="报价金额")
    admin_notes: Optional[str] = Field(None, description="管理员备注")
    coupon_id: Optional[str] = Field(None, description="附带的优惠券ID，仅报价时生效")


class QuoteRespondRequest(BaseModel):
    """客户回复报价请求"""

    quote_id: str = Field(..., description="报价ID")
    action: QuoteAction = Field(..., description="回复动作")
    message: Optional[str] = Field(None, description="拒绝理由或还价内容")


class QuoteResponse(BaseModel):
    """报价响应模型"""

    quote_id: str
    quote_number: str
    product_id: Optional[str]
    name: str
    email: str
    phone: Optional[str]
    message: Optional[str]
    file_name: Optional[str]
    file_url: Optional[str]
    file_size: Optional[int]
    status: QuoteStatus
    display_status: DisplayStatus
    quoted_price: Optional[Decimal]
    admin_notes: Optional[str]
    user_response: Optional[str]
    coupon_code: Optional[str]
    viewed_at: Optional[datetime]
    quoted_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_quote(cls, quote: QuoteRequest) -> "QuoteResponse":
        """从QuoteRequest模型创建响应对象"""
        return cls(
            quote_id=quote.quote_id,
            quote_number=quote.quote_number,
            product_id=quote.product_id,
            name=quote.name,
            email=quote.email,
            phone=quote.phone,
            message=quote.message,
            file_name=quote.file_name,
            file_url=quote.file_url,
            file_size=quote.file_size,
            status=quote.status,
            display_status=quote.display_status,
            quoted_price=quote.quoted_price,
            admin_notes=quote.admin_notes,
            user_response=quote.user_response,
            coupon_code=quote.coupon_code,
            viewed_at=quote.viewed_at,
            quoted_at=quote.quoted_at,
            created_at=quote.created_at,
            updated_at=quote.updated_at
        )
