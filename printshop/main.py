from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from printshop.core.config import settings
from printshop.core.redis import redis_manager
from printshop.core.database import init_database, close_database
from printshop.api.health import router as health_router
from printshop.api.coupons import router as coupons_router
from printshop.api.quotes import router as quotes_router
from printshop.api.admin_quotes import router as admin_quotes_router
from printshop.api.checkout import router as checkout_router
from printshop.api.exceptions import (
    validation_exception_handler,
    http_exception_handler,
    database_exception_handler,
    general_exception_handler,
    business_exception_handler,
    BusinessException
)

import logging

logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("正在启动店铺报价与优惠券服务")

    try:
        await init_database()
        logger.info("数据库初始化成功")
    except Exception as e:
        logger.error(f"应用启动失败: {e}")
        raise

    # 促销缓存可选，Redis不可用时直接查库
    try:
        await redis_manager.init_redis()
    except Exception as e:
        logger.warning(f"Redis不可用，促销缓存已关闭: {e}")

    logger.info("应用启动完成")

    yield

    logger.info("正在关闭应用")
    await close_database()
    await redis_manager.close_redis()
    logger.info("应用关闭完成")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="3D打印店铺 - 报价协商、优惠券校验与多语言报价对话",
    debug=settings.debug,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 注册路由
app.include_router(health_router)
app.include_router(coupons_router)
app.include_router(quotes_router)
app.include_router(admin_quotes_router)
app.include_router(checkout_router)

# 注册异常处理器
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(BusinessException, business_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": f"欢迎使用 {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    uvicorn.run(
        "printshop.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
