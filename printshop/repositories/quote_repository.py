"""
报价请求数据库操作层
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update, and_, desc
from sqlalchemy.ext.asyncio import AsyncSession

from printshop.models.quote import QuoteMessage, QuoteRequest, QuoteSubmission
from printshop.models.database.quote_db import QuoteMessageDB, QuoteRequestDB


class QuoteRepository:
    """报价请求数据库操作类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def get_by_quote_id(self, quote_id: str) -> Optional[QuoteRequestDB]:
        """根据报价ID获取报价 (总是读取最新数据)"""
        result = await self.db.execute(
            select(QuoteRequestDB)
            .where(QuoteRequestDB.quote_id == quote_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_for_customer(self, quote_id: str, email: str, status: Optional[str] = None) -> Optional[QuoteRequestDB]:
        """按报价ID + 客户邮箱 (+ 状态) 查找，用于客户操作的归属校验"""
        conditions = [
            QuoteRequestDB.quote_id == quote_id,
            QuoteRequestDB.email == email
        ]
        if status:
            conditions.append(QuoteRequestDB.status == status)

        result = await self.db.execute(
            select(QuoteRequestDB)
            .where(and_(*conditions))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def quote_number_exists(self, quote_number: str) -> bool:
        result = await self.db.execute(
            select(QuoteRequestDB.quote_id).where(QuoteRequestDB.quote_number == quote_number)
        )
        return result.scalar_one_or_none() is not None

    async def create(
        self,
        quote_id: str,
        quote_number: str,
        submission: QuoteSubmission,
        file_name: Optional[str] = None,
        file_url: Optional[str] = None,
        file_size: Optional[int] = None
    ) -> QuoteRequestDB:
        """创建报价请求，初始状态为 pending"""
        db_quote = QuoteRequestDB(
            quote_id=quote_id,
            quote_number=quote_number,
            product_id=submission.product_id or None,
            name=submission.name,
            email=submission.email,
            phone=submission.phone or None,
            message=submission.message or None,
            file_name=file_name,
            file_url=file_url,
            file_size=file_size,
            status="pending"
        )
        self.db.add(db_quote)
        await self.db.flush()
        return db_quote

    async def update_quote(
        self,
        quote_id: str,
        values: Dict[str, Any],
        expected_email: Optional[str] = None,
        expected_status: Optional[str] = None
    ) -> bool:
        """
        条件更新报价

        expected_email / expected_status 作为写入条件，避免读取与写入之间状态已被改变
        """
        conditions = [QuoteRequestDB.quote_id == quote_id]
        if expected_email is not None:
            conditions.append(QuoteRequestDB.email == expected_email)
        if expected_status is not None:
            conditions.append(QuoteRequestDB.status == expected_status)

        update_data = dict(values)
        update_data["updated_at"] = datetime.now()

        result = await self.db.execute(
            update(QuoteRequestDB)
            .where(and_(*conditions))
            .values(**update_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def append_message(
        self,
        quote_id: str,
        sender_type: str,
        message: str,
        quoted_price: Optional[Decimal] = None
    ) -> QuoteMessageDB:
        """追加一条对话记录"""
        db_message = QuoteMessageDB(
            quote_id=quote_id,
            sender_type=sender_type,
            message=message,
            quoted_price=quoted_price,
            created_at=datetime.now()
        )
        self.db.add(db_message)
        await self.db.flush()
        return db_message

    async def list_messages(self, quote_id: str) -> List[QuoteMessageDB]:
        """按时间顺序获取对话记录"""
        result = await self.db.execute(
            select(QuoteMessageDB)
            .where(QuoteMessageDB.quote_id == quote_id)
            .order_by(QuoteMessageDB.created_at, QuoteMessageDB.message_id)
        )
        return list(result.scalars().all())

    async def list_quotes(self, status: Optional[str] = None, limit: int = 200, offset: int = 0) -> List[QuoteRequestDB]:
        """管理员报价队列，最新的在前"""
        query = select(QuoteRequestDB)
        if status:
            query = query.where(QuoteRequestDB.status == status)
        query = query.order_by(desc(QuoteRequestDB.created_at)).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    def to_model(self, db_quote: QuoteRequestDB) -> QuoteRequest:
        """转换为Pydantic模型"""
        return QuoteRequest(
            quote_id=db_quote.quote_id,
            quote_number=db_quote.quote_number,
            product_id=db_quote.product_id,
            name=db_quote.name,
            email=db_quote.email,
            phone=db_quote.phone,
            message=db_quote.message,
            file_name=db_quote.file_name,
            file_url=db_quote.file_url,
            file_size=db_quote.file_size,
            status=db_quote.status,
            quoted_price=db_quote.quoted_price,
            admin_notes=db_quote.admin_notes,
            user_response=db_quote.user_response,
            coupon_id=db_quote.coupon_id,
            coupon_code=db_quote.coupon_code,
            coupon_type=db_quote.coupon_type,
            coupon_value=db_quote.coupon_value,
            coupon_currency=db_quote.coupon_currency,
            viewed_at=db_quote.viewed_at,
            quoted_at=db_quote.quoted_at,
            created_at=db_quote.created_at or datetime.now(),
            updated_at=db_quote.updated_at or datetime.now()
        )

    def message_to_model(self, db_message: QuoteMessageDB) -> QuoteMessage:
        return QuoteMessage(
            message_id=db_message.message_id,
            quote_id=db_message.quote_id,
            sender_type=db_message.sender_type,
            message=db_message.message,
            quoted_price=db_message.quoted_price,
            created_at=db_message.created_at
        )
