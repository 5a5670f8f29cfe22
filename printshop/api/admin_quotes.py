"""
管理员报价接口
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from printshop.api.deps import get_quote_service, require_admin
from printshop.models.quote import AdminQuoteUpdate, DisplayStatus, QuoteResponse
from printshop.services.quote_service import QuoteService

router = APIRouter(prefix="/admin/quotes", tags=["管理员-报价"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[QuoteResponse])
async def list_quotes(
    status: Optional[DisplayStatus] = None,
    quote_service: QuoteService = Depends(get_quote_service),
):
    quotes = await quote_service.list_quotes(status.value if status else None)
    return [QuoteResponse.from_quote(q) for q in quotes]


@router.put("/{quote_id}", response_model=QuoteResponse)
async def update_quote(
    quote_id: str,
    payload: AdminQuoteUpdate,
    locale: Optional[str] = None,
    quote_service: QuoteService = Depends(get_quote_service),
):
    """报价 (status=quoted) 或手动修改状态"""
    quote = await quote_service.admin_set_offer(quote_id, payload, locale)
    return QuoteResponse.from_quote(quote)
