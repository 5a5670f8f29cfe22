"""
报价业务服务层

报价状态机:
    pending --管理员报价--> quoted
    quoted  --客户接受--> accepted
    quoted  --客户拒绝--> user_declined
    quoted  --客户还价--> pending (user_response 非空，展示为 counter_offer)
    任意状态 --管理员手动修改--> 任意状态 (不写对话记录)

每个操作拆成按顺序独立提交的写入步骤: 状态变更(关键) -> 对话记录 -> 通知
"""

import logging
import re
import secrets
import uuid
from typing import List, Optional, Tuple
from datetime import datetime

from printshop.api.exceptions import QuoteNotFoundError, QuoteValidationError
from printshop.core.config import settings
from printshop.models.coupon import coupon_discount_label
from printshop.models.quote import (
    AdminQuoteUpdate,
    DisplayStatus,
    LocalizedQuoteMessage,
    QuoteAction,
    QuoteAttachment,
    QuoteRequest,
    QuoteStatus,
    QuoteSubmission,
    QuoteSubmitResult,
    SenderType,
)
from printshop.repositories.quote_repository import QuoteRepository
from printshop.services.coupon_service import CouponService
from printshop.services.file_storage import FileStorage
from printshop.services.notification_service import NotificationService
from printshop.services.quote_messages import (
    compose_offer_message,
    encode_accepted,
    encode_counter_offer,
    encode_declined,
    localize_message,
)
from printshop.services.write_steps import StepRunner, WriteStep

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
QUOTE_NUMBER_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
QUOTE_NUMBER_ATTEMPTS = 10


def generate_quote_number(suffix: Optional[str] = None) -> str:
    """报价编号，例如 QUO-7KQ2@D4D"""
    code = "".join(secrets.choice(QUOTE_NUMBER_ALPHABET) for _ in range(4))
    return f"QUO-{code}@{suffix or settings.quote_number_suffix}"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


class QuoteService:
    """报价业务服务"""

    def __init__(
        self,
        quote_repo: QuoteRepository,
        coupon_service: CouponService,
        notification_service: NotificationService,
        file_storage: Optional[FileStorage] = None
    ):
        self.quote_repo = quote_repo
        self.coupon_service = coupon_service
        self.notification_service = notification_service
        self.file_storage = file_storage

    def _runner(self, operation: str) -> StepRunner:
        return StepRunner(self.quote_repo.commit, self.quote_repo.rollback, operation)

    async def _reload(self, quote_id: str) -> QuoteRequest:
        db_quote = await self.quote_repo.get_by_quote_id(quote_id)
        if not db_quote:
            raise QuoteNotFoundError()
        return self.quote_repo.to_model(db_quote)

    # ------------------------------------------------------------------
    # 提交
    # ------------------------------------------------------------------

    def _validate_submission(self, submission: QuoteSubmission, attachment: Optional[QuoteAttachment]) -> None:
        """所有校验在任何写入之前完成"""
        if not (submission.name or "").strip() or not (submission.email or "").strip():
            raise QuoteValidationError("MISSING_FIELDS", "Name and email are required")
        if not is_valid_email(submission.email.strip()):
            raise QuoteValidationError("INVALID_EMAIL", "Invalid email address")

        if attachment is None:
            return
        if attachment.size > settings.max_upload_size_bytes:
            raise QuoteValidationError(
                "FILE_TOO_LARGE",
                f"File size must not exceed {settings.max_upload_size_mb}MB"
            )
        if attachment.extension not in settings.allowed_upload_extensions:
            raise QuoteValidationError(
                "INVALID_FILE_TYPE",
                f"Only {', '.join(settings.allowed_upload_extensions)} files are allowed"
            )

    async def _unique_quote_number(self) -> str:
        for _ in range(QUOTE_NUMBER_ATTEMPTS):
            quote_number = generate_quote_number()
            if not await self.quote_repo.quote_number_exists(quote_number):
                return quote_number
        raise RuntimeError("无法生成唯一的报价编号")

    async def submit_quote(
        self,
        submission: QuoteSubmission,
        attachment: Optional[QuoteAttachment] = None
    ) -> QuoteSubmitResult:
        """提交报价请求，初始状态为 pending"""
        if attachment is not None and attachment.size == 0:
            attachment = None
        self._validate_submission(submission, attachment)

        submission = submission.model_copy(update={
            "name": submission.name.strip(),
            "email": submission.email.strip()
        })

        file_name = file_url = file_size = None
        if attachment is not None:
            if self.file_storage is None:
                raise RuntimeError("未配置附件存储")
            file_url = await self.file_storage.save(attachment.filename, attachment.content)
            file_name = attachment.filename
            file_size = attachment.size

        quote_id = str(uuid.uuid4())
        quote_number = await self._unique_quote_number()

        async def create_quote():
            db_quote = await self.quote_repo.create(
                quote_id=quote_id,
                quote_number=quote_number,
                submission=submission,
                file_name=file_name,
                file_url=file_url,
                file_size=file_size
            )
            return db_quote.quote_id

        await self._runner("submit_quote").run([WriteStep("create", create_quote, critical=True)])
        logger.info(f"报价请求已提交 {quote_number} ({quote_id})")
        return QuoteSubmitResult(quote_id=quote_id, quote_number=quote_number)

    # ------------------------------------------------------------------
    # 管理员
    # ------------------------------------------------------------------

    async def admin_set_offer(
        self,
        quote_id: str,
        update: AdminQuoteUpdate,
        locale: Optional[str] = None
    ) -> QuoteRequest:
        """
        管理员更新报价

        目标状态为 quoted 时: 必须有报价金额，可附带优惠券 (校验后保存快照)，
        写入报价消息并通知客户。其他目标状态视为手动修改，只更新字段。
        """
        db_quote = await self.quote_repo.get_by_quote_id(quote_id)
        if not db_quote:
            raise QuoteNotFoundError("Quote not found")
        quote = self.quote_repo.to_model(db_quote)

        if update.quoted_price is not None and update.quoted_price < 0:
            raise QuoteValidationError("NEGATIVE_PRICE", "Quoted price cannot be negative")

        if update.status != QuoteStatus.QUOTED:
            return await self._manual_edit(quote, update)

        if update.quoted_price is None:
            raise QuoteValidationError("QUOTED_PRICE_REQUIRED", "A quoted price is required")

        coupon_values = {
            "coupon_id": None,
            "coupon_code": None,
            "coupon_type": None,
            "coupon_value": None,
            "coupon_currency": None,
        }
        coupon_code = coupon_label = None
        if update.coupon_id:
            validation = await self.coupon_service.price_quote_offer(
                coupon_id=update.coupon_id,
                quoted_price=update.quoted_price,
                product_id=quote.product_id,
                email=quote.email
            )
            if not validation.is_valid:
                raise QuoteValidationError("COUPON_INVALID", validation.error_message or validation.error_code.value)
            summary = validation.coupon
            coupon_values = {
                "coupon_id": summary.coupon_id,
                "coupon_code": summary.code,
                "coupon_type": summary.coupon_type.value,
                "coupon_value": summary.value,
                "coupon_currency": summary.currency,
            }
            coupon_code, coupon_label = summary.code, summary.discount_label

        values = {
            "status": QuoteStatus.QUOTED.value,
            "quoted_price": update.quoted_price,
            "admin_notes": update.admin_notes or None,
            "quoted_at": datetime.now(),
            **coupon_values
        }
        offer_text = compose_offer_message(
            update.admin_notes,
            update.quoted_price,
            settings.default_currency,
            coupon_code,
            coupon_label,
            locale
        )
        email, product_id, price = quote.email, quote.product_id, update.quoted_price
        coupon_id = coupon_values["coupon_id"]

        async def set_status():
            await self.quote_repo.update_quote(quote_id, values)
            return await self._reload(quote_id)

        async def append_offer_message():
            db_message = await self.quote_repo.append_message(quote_id, SenderType.ADMIN.value, offer_text, price)
            return db_message.message_id

        async def notify_customer():
            return await self.notification_service.notify_quote_offer(
                quote_id=quote_id,
                email=email,
                quoted_price=price,
                coupon_id=coupon_id,
                product_id=product_id
            )

        report = await self._runner("admin_set_offer").run([
            WriteStep("status", set_status, critical=True),
            WriteStep("message", append_offer_message),
            WriteStep("notification", notify_customer),
        ])
        logger.info(f"报价 {quote.quote_number} 已报价 {price} (优惠券: {coupon_code or '-'})")
        return report.results["status"]

    async def _manual_edit(self, quote: QuoteRequest, update: AdminQuoteUpdate) -> QuoteRequest:
        """手动修改状态，不写对话记录也不发通知"""
        quote_id = quote.quote_id
        values = {
            "status": update.status.value,
            "quoted_price": update.quoted_price,
            "admin_notes": update.admin_notes or None,
        }

        async def set_status():
            await self.quote_repo.update_quote(quote_id, values)
            return await self._reload(quote_id)

        report = await self._runner("admin_manual_edit").run([WriteStep("status", set_status, critical=True)])
        logger.info(f"报价 {quote.quote_number} 手动修改: {quote.status.value} -> {update.status.value}")
        return report.results["status"]

    async def list_quotes(self, status: Optional[str] = None) -> List[QuoteRequest]:
        """
        管理员报价队列，按展示状态过滤

        counter_offer 不落库，按 pending 查询后再过滤
        """
        display = DisplayStatus(status) if status else None
        stored = QuoteStatus.PENDING.value if display == DisplayStatus.COUNTER_OFFER else (status or None)

        db_quotes = await self.quote_repo.list_quotes(stored)
        quotes = [self.quote_repo.to_model(db_quote) for db_quote in db_quotes]
        if display is not None:
            quotes = [q for q in quotes if q.display_status == display]
        return quotes

    # ------------------------------------------------------------------
    # 客户
    # ------------------------------------------------------------------

    async def _accepted_coupon(self, quote: QuoteRequest) -> Tuple[Optional[str], Optional[str]]:
        """接受消息中的优惠券信息，优先使用快照"""
        if quote.has_coupon_snapshot:
            label = coupon_discount_label(
                quote.coupon_type,
                quote.coupon_value,
                quote.coupon_currency,
                settings.default_currency
            )
            return quote.coupon_code, label

        try:
            found = await self.notification_service.find_offer_coupon_label(quote.quote_id)
        except Exception as e:
            # 失败的查询会让当前事务不可用，回滚后主写入才能继续
            await self.quote_repo.rollback()
            logger.warning(f"报价 {quote.quote_id} 查找旧优惠券失败，忽略: {e}")
            return None, None
        if not found:
            return None, None
        return found

    async def respond_to_quote(
        self,
        quote_id: str,
        email: str,
        action: QuoteAction,
        message: Optional[str] = None
    ) -> QuoteRequest:
        """
        客户回复报价

        只有报价归属于调用方且状态为 quoted 时才允许操作，
        其他情况统一返回未找到，不暴露报价是否存在
        """
        text = (message or "").strip()
        if action == QuoteAction.COUNTER_OFFER and not text:
            raise QuoteValidationError("EMPTY_COUNTER_OFFER", "Counter offer message is required")

        db_quote = await self.quote_repo.get_for_customer(quote_id, email, QuoteStatus.QUOTED.value)
        if not db_quote:
            raise QuoteNotFoundError()
        quote = self.quote_repo.to_model(db_quote)

        if action == QuoteAction.ACCEPT:
            coupon_code, coupon_label = await self._accepted_coupon(quote)
            values = {"status": QuoteStatus.ACCEPTED.value, "user_response": None}
            envelope = encode_accepted(quote.quoted_price, coupon_code, coupon_label)
            message_price = quote.quoted_price
        elif action == QuoteAction.DECLINE:
            values = {"status": QuoteStatus.USER_DECLINED.value, "user_response": text or None}
            envelope = encode_declined(text or None)
            message_price = None
        else:
            values = {"status": QuoteStatus.PENDING.value, "user_response": text}
            envelope = encode_counter_offer(text)
            message_price = None

        async def set_status():
            applied = await self.quote_repo.update_quote(
                quote_id,
                values,
                expected_email=email,
                expected_status=QuoteStatus.QUOTED.value
            )
            if not applied:
                raise QuoteNotFoundError()
            return await self._reload(quote_id)

        async def append_response_message():
            db_message = await self.quote_repo.append_message(quote_id, SenderType.USER.value, envelope, message_price)
            return db_message.message_id

        report = await self._runner(f"respond_to_quote:{action.value}").run([
            WriteStep("status", set_status, critical=True),
            WriteStep("message", append_response_message),
        ])
        logger.info(f"报价 {quote.quote_number} 客户回复 {action.value}")
        return report.results["status"]

    async def mark_viewed(self, quote_id: str, email: str) -> QuoteRequest:
        """客户查看报价，只在 quoted 状态下记录第一次查看时间"""
        db_quote = await self.quote_repo.get_for_customer(quote_id, email)
        if not db_quote:
            raise QuoteNotFoundError("Quote not found")
        quote = self.quote_repo.to_model(db_quote)

        if quote.status != QuoteStatus.QUOTED or quote.viewed_at is not None:
            return quote

        async def set_viewed():
            await self.quote_repo.update_quote(
                quote_id,
                {"viewed_at": datetime.now()},
                expected_email=email,
                expected_status=QuoteStatus.QUOTED.value
            )
            return await self._reload(quote_id)

        report = await self._runner("mark_viewed").run([WriteStep("viewed", set_viewed, critical=True)])
        return report.results["viewed"]

    async def list_messages(
        self,
        quote_id: str,
        email: Optional[str],
        is_staff: bool = False,
        locale: Optional[str] = None
    ) -> List[LocalizedQuoteMessage]:
        """报价对话记录，客户本人或管理员可查看"""
        if is_staff:
            db_quote = await self.quote_repo.get_by_quote_id(quote_id)
        elif email:
            db_quote = await self.quote_repo.get_for_customer(quote_id, email)
        else:
            db_quote = None
        if not db_quote:
            raise QuoteNotFoundError("Quote not found")

        db_messages = await self.quote_repo.list_messages(quote_id)
        localized = []
        for db_message in db_messages:
            msg = self.quote_repo.message_to_model(db_message)
            localized.append(LocalizedQuoteMessage(
                message_id=msg.message_id,
                sender_type=msg.sender_type,
                lines=localize_message(msg.message, locale),
                quoted_price=msg.quoted_price,
                created_at=msg.created_at
            ))
        return localized
