"""
业务异常定义与全局异常处理器
"""

import logging

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BusinessException(Exception):
    """业务异常基类，code为机器可读的错误码"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: str, message: str, status_code: int = None):
        super().__init__(message)
        self.code = code
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class QuoteValidationError(BusinessException):
    """报价请求校验失败，发生在任何写入之前"""


class QuoteNotFoundError(BusinessException):
    """报价不存在、不属于调用方或状态不允许操作 (对外不区分)"""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Quote not found or cannot be responded to"):
        super().__init__("QUOTE_NOT_FOUND", message)


class AdminAuthError(BusinessException):
    """管理员凭证无效"""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self):
        super().__init__("UNAUTHORIZED", "Unauthorized")


async def business_exception_handler(request: Request, exc: BusinessException):
    """业务异常处理"""
    logger.info(f"业务异常 {exc.code}: {exc.message} ({request.url.path})")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "message": exc.message}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """请求参数校验异常处理"""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({"error": "VALIDATION_ERROR", "details": exc.errors()})
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """HTTP异常处理"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail}
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """数据库异常处理"""
    logger.error(f"数据库异常 {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "INTERNAL_ERROR", "message": "Internal server error"}
    )


async def general_exception_handler(request: Request, exc: Exception):
    """未分类异常处理"""
    logger.exception(f"未处理异常 {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "INTERNAL_ERROR", "message": "Internal server error"}
    )
