"""
客户报价接口
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Header, UploadFile

from printshop.api.deps import get_customer_email, get_quote_service, is_admin_key
from printshop.api.exceptions import QuoteNotFoundError
from printshop.core.config import settings
from printshop.models.quote import (
    LocalizedQuoteMessage,
    QuoteAttachment,
    QuoteRespondRequest,
    QuoteResponse,
    QuoteSubmission,
    QuoteSubmitResult,
)
from printshop.services.quote_service import QuoteService

router = APIRouter(prefix="/quotes", tags=["报价"])

UPLOAD_CHUNK_SIZE = 1024 * 1024


def _require_caller(email: Optional[str]) -> str:
    # 未登录与无权访问对外不区分
    if not email:
        raise QuoteNotFoundError()
    return email


async def _read_attachment(file: UploadFile) -> Optional[QuoteAttachment]:
    """
    分块读取上传文件，内存占用不超过大小上限

    超限时停止读取，只带上大小交给服务层拒绝；空文件视为没有附件
    """
    limit = settings.max_upload_size_bytes
    if file.size is not None and file.size > limit:
        return QuoteAttachment(filename=file.filename, declared_size=file.size)

    chunks = []
    received = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        received += len(chunk)
        if received > limit:
            return QuoteAttachment(filename=file.filename, declared_size=received)
        chunks.append(chunk)

    if received == 0:
        return None
    return QuoteAttachment(filename=file.filename, content=b"".join(chunks))


@router.post("", response_model=QuoteSubmitResult, status_code=201)
async def submit_quote(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    product_id: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    quote_service: QuoteService = Depends(get_quote_service),
):
    """公开报价表单，可附带一个3D模型文件"""
    attachment = None
    if file is not None and file.filename:
        attachment = await _read_attachment(file)

    submission = QuoteSubmission(name=name, email=email, phone=phone, message=message, product_id=product_id)
    return await quote_service.submit_quote(submission, attachment)


@router.post("/respond", response_model=QuoteResponse)
async def respond_to_quote(
    payload: QuoteRespondRequest,
    caller_email: Optional[str] = Depends(get_customer_email),
    quote_service: QuoteService = Depends(get_quote_service),
):
    quote = await quote_service.respond_to_quote(
        payload.quote_id,
        _require_caller(caller_email),
        payload.action,
        payload.message
    )
    return QuoteResponse.from_quote(quote)


@router.post("/{quote_id}/view", response_model=QuoteResponse)
async def mark_quote_viewed(
    quote_id: str,
    caller_email: Optional[str] = Depends(get_customer_email),
    quote_service: QuoteService = Depends(get_quote_service),
):
    quote = await quote_service.mark_viewed(quote_id, _require_caller(caller_email))
    return QuoteResponse.from_quote(quote)


@router.get("/{quote_id}/messages", response_model=List[LocalizedQuoteMessage])
async def list_quote_messages(
    quote_id: str,
    locale: Optional[str] = None,
    caller_email: Optional[str] = Depends(get_customer_email),
    x_admin_key: Optional[str] = Header(None),
    quote_service: QuoteService = Depends(get_quote_service),
):
    """客户本人或管理员查看对话记录"""
    return await quote_service.list_messages(
        quote_id,
        caller_email,
        is_staff=is_admin_key(x_admin_key),
        locale=locale
    )
