"""
通用缓存工具
为促销优惠券列表提供简单的Redis缓存功能，Redis不可用时按未命中处理
"""

import json
import logging
from typing import Optional, Any
import redis.asyncio as redis

from printshop.core.redis import get_redis_client

logger = logging.getLogger(__name__)


class SimpleCache:
    """简单缓存管理器"""

    def __init__(self, redis_client: Optional[redis.Redis] = None, key_prefix: str = ""):
        self.redis_client = redis_client
        self.key_prefix = key_prefix

    @property
    def client(self) -> Optional[redis.Redis]:
        """未显式注入时使用全局连接池"""
        return self.redis_client or get_redis_client()

    def _get_key(self, key: str) -> str:
        """获取完整的缓存key"""
        return f"{self.key_prefix}{key}" if self.key_prefix else key

    async def get(self, key: str) -> Optional[Any]:
        """获取缓存值"""
        client = self.client
        if client is None:
            return None
        try:
            data = await client.get(self._get_key(key))
            if data:
                return json.loads(data)
            return None

        except Exception as e:
            logger.error(f"获取缓存失败 {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """设置缓存值"""
        client = self.client
        if client is None:
            return False
        try:
            data = json.dumps(value, default=str, ensure_ascii=False)
            await client.setex(self._get_key(key), ttl, data)
            return True

        except Exception as e:
            logger.error(f"设置缓存失败 {key}: {e}")
            return False


# 优惠券模块的缓存实例
coupon_cache = SimpleCache(key_prefix="coupon:")
