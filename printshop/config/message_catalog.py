"""
多语言消息目录 - 报价对话、状态标签与优惠券错误提示
"""

from typing import Any, Dict, Optional

from printshop.core.config import settings

# 每种语言一份模板，占位符使用 str.format 语法
MESSAGE_CATALOG: Dict[str, Dict[str, str]] = {
    "en": {
        "msg_accepted": "Offer accepted",
        "msg_at_price": "at {price}",
        "msg_coupon_applied": "Coupon {code} (-{discount})",
        "msg_declined": "Offer declined",
        "msg_counter_offer": "Counter offer",
        "status_pending": "Pending",
        "status_quoted": "Quoted",
        "status_accepted": "Accepted",
        "status_rejected": "Rejected",
        "status_user_declined": "Declined",
        "status_counter_offer": "Counter offer",
        "offer_price_line": "Price: {price} {currency}",
        "offer_coupon_line": "Coupon: {code} (-{discount})",
        "coupon_NOT_FOUND": "Coupon not found",
        "coupon_INACTIVE": "This coupon is no longer active",
        "coupon_NOT_STARTED": "This coupon is not valid yet",
        "coupon_EXPIRED": "This coupon has expired",
        "coupon_MAX_USES": "This coupon has reached its usage limit",
        "coupon_USER_LIMIT": "You have already used this coupon",
        "coupon_WRONG_PRODUCT": "This coupon does not apply to this product",
        "coupon_NOT_ON_SALE": "This coupon cannot be combined with a sale price",
        "coupon_MIN_PURCHASE": "The minimum purchase amount for this coupon is not met",
        "coupon_CURRENCY_MISMATCH": "This coupon is not valid for the product currency",
        "coupon_MISSING_PARAMS": "Please enter a coupon code",
        "coupon_PRODUCT_NOT_FOUND": "Product not available",
    },
    "bg": {
        "msg_accepted": "Офертата е приета",
        "msg_at_price": "на цена {price}",
        "msg_coupon_applied": "Купон {code} (-{discount})",
        "msg_declined": "Офертата е отказана",
        "msg_counter_offer": "Насрещно предложение",
        "status_pending": "Чакаща",
        "status_quoted": "Оферирана",
        "status_accepted": "Приета",
        "status_rejected": "Отхвърлена",
        "status_user_declined": "Отказана",
        "status_counter_offer": "Насрещно предложение",
        "offer_price_line": "Цена: {price} {currency}",
        "offer_coupon_line": "Купон: {code} (-{discount})",
        "coupon_NOT_FOUND": "Купонът не е намерен",
        "coupon_INACTIVE": "Купонът вече не е активен",
        "coupon_NOT_STARTED": "Купонът все още не е валиден",
        "coupon_EXPIRED": "Купонът е изтекъл",
        "coupon_MAX_USES": "Купонът е достигнал лимита си на използване",
        "coupon_USER_LIMIT": "Вече сте използвали този купон",
        "coupon_WRONG_PRODUCT": "Купонът не важи за този продукт",
        "coupon_NOT_ON_SALE": "Купонът не може да се комбинира с промоционална цена",
        "coupon_MIN_PURCHASE": "Не е достигната минималната сума за този купон",
        "coupon_CURRENCY_MISMATCH": "Купонът не важи за валутата на продукта",
        "coupon_MISSING_PARAMS": "Моля, въведете код на купон",
        "coupon_PRODUCT_NOT_FOUND": "Продуктът не е наличен",
    },
    "es": {
        "msg_accepted": "Oferta aceptada",
        "msg_at_price": "por {price}",
        "msg_coupon_applied": "Cupón {code} (-{discount})",
        "msg_declined": "Oferta rechazada",
        "msg_counter_offer": "Contraoferta",
        "status_pending": "Pendiente",
        "status_quoted": "Cotizada",
        "status_accepted": "Aceptada",
        "status_rejected": "Rechazada",
        "status_user_declined": "Declinada",
        "status_counter_offer": "Contraoferta",
        "offer_price_line": "Precio: {price} {currency}",
        "offer_coupon_line": "Cupón: {code} (-{discount})",
        "coupon_NOT_FOUND": "Cupón no encontrado",
        "coupon_INACTIVE": "Este cupón ya no está activo",
        "coupon_NOT_STARTED": "Este cupón aún no es válido",
        "coupon_EXPIRED": "Este cupón ha caducado",
        "coupon_MAX_USES": "Este cupón ha alcanzado su límite de usos",
        "coupon_USER_LIMIT": "Ya has utilizado este cupón",
        "coupon_WRONG_PRODUCT": "Este cupón no se aplica a este producto",
        "coupon_NOT_ON_SALE": "Este cupón no se puede combinar con un precio rebajado",
        "coupon_MIN_PURCHASE": "No se alcanza el importe mínimo de compra para este cupón",
        "coupon_CURRENCY_MISMATCH": "Este cupón no es válido para la moneda del producto",
        "coupon_MISSING_PARAMS": "Introduce un código de cupón",
        "coupon_PRODUCT_NOT_FOUND": "Producto no disponible",
    },
}


def resolve_locale(locale: Optional[str]) -> str:
    """不支持的语言回退到默认语言"""
    if locale and locale in MESSAGE_CATALOG:
        return locale
    return settings.default_locale


def translate(key: str, locale: Optional[str] = None, **params: Any) -> str:
    """
    按语言取模板并填充参数

    找不到键时依次回退到默认语言和英语，最后返回键本身
    """
    catalog = MESSAGE_CATALOG[resolve_locale(locale)]
    template = catalog.get(key) or MESSAGE_CATALOG["en"].get(key)
    if template is None:
        return key
    return template.format(**params) if params else template


def status_label(status: str, locale: Optional[str] = None) -> str:
    """报价展示状态标签"""
    return translate(f"status_{status}", locale)


def coupon_error_message(code: str, locale: Optional[str] = None) -> str:
    """优惠券错误码对应的提示"""
    return translate(f"coupon_{code}", locale)


def localize_field(entity: Any, field: str, locale: Optional[str] = None) -> Optional[str]:
    """
    读取多语言并列字段，例如 name_bg / name_en / name_es

    当前语言为空时回退到英语字段
    """
    value = getattr(entity, f"{field}_{resolve_locale(locale)}", None)
    if value:
        return value
    return getattr(entity, f"{field}_en", None)
