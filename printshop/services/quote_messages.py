"""
报价对话结构化消息协议

客户发起的状态变更以JSON信封保存 {"key": ..., ...payload}，渲染时按语言目录展开；
管理员消息和历史纯文本消息按换行拆分原样展示。
"""

import json
from decimal import Decimal
from typing import Any, Dict, List, Optional

from printshop.config.message_catalog import translate

ACCEPTED_KEY = "accepted"
DECLINED_KEY = "declined"
COUNTER_OFFER_KEY = "counter_offer"
STRUCTURED_KEYS = frozenset({ACCEPTED_KEY, DECLINED_KEY, COUNTER_OFFER_KEY})


def format_price(amount: Optional[Decimal]) -> Optional[str]:
    """金额格式化为两位小数字符串"""
    if amount is None:
        return None
    return f"{Decimal(amount):.2f}"


def encode_accepted(price: Optional[Decimal], coupon_code: Optional[str] = None, coupon_discount: Optional[str] = None) -> str:
    return json.dumps({
        "key": ACCEPTED_KEY,
        "price": format_price(price),
        "couponCode": coupon_code,
        "couponDiscount": coupon_discount,
    }, ensure_ascii=False)


def encode_declined(text: Optional[str]) -> str:
    return json.dumps({"key": DECLINED_KEY, "text": text}, ensure_ascii=False)


def encode_counter_offer(text: str) -> str:
    return json.dumps({"key": COUNTER_OFFER_KEY, "text": text}, ensure_ascii=False)


def parse_envelope(raw: str) -> Optional[Dict[str, Any]]:
    """解析结构化消息，不是可识别的信封时返回None"""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict) or data.get("key") not in STRUCTURED_KEYS:
        return None
    return data


def localize_message(raw: str, locale: Optional[str] = None) -> List[str]:
    """将一条对话消息渲染为若干展示行"""
    data = parse_envelope(raw)
    if data is None:
        return raw.split("\n")

    lines: List[str] = []
    key = data["key"]
    if key == ACCEPTED_KEY:
        lines.append(translate("msg_accepted", locale))
        if data.get("price"):
            lines.append(translate("msg_at_price", locale, price=data["price"]))
        if data.get("couponCode") and data.get("couponDiscount"):
            lines.append(translate(
                "msg_coupon_applied", locale,
                code=data["couponCode"], discount=data["couponDiscount"]
            ))
    elif key == DECLINED_KEY:
        lines.append(translate("msg_declined", locale))
        if data.get("text"):
            lines.append(str(data["text"]))
    else:
        lines.append(translate("msg_counter_offer", locale))
        if data.get("text"):
            lines.append(str(data["text"]))
    return lines


def compose_offer_message(
    admin_notes: Optional[str],
    price: Decimal,
    currency: str,
    coupon_code: Optional[str] = None,
    coupon_discount: Optional[str] = None,
    locale: Optional[str] = None
) -> str:
    """管理员报价消息 (纯文本)：备注、价格行、优惠券行"""
    lines = []
    if admin_notes and admin_notes.strip():
        lines.append(admin_notes.strip())
    lines.append(translate("offer_price_line", locale, price=format_price(price), currency=currency))
    if coupon_code and coupon_discount:
        lines.append(translate("offer_coupon_line", locale, code=coupon_code, discount=coupon_discount))
    return "\n".join(lines)
