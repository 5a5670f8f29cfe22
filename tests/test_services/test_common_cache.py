"""
SimpleCache测试 - 模拟Redis客户端
"""

import json
import pytest
from unittest.mock import AsyncMock

from printshop.services.common_cache import SimpleCache


@pytest.mark.asyncio
class TestSimpleCache:

    @pytest.fixture
    def redis_client(self):
        return AsyncMock()

    @pytest.fixture
    def cache(self, redis_client):
        return SimpleCache(redis_client=redis_client, key_prefix="coupon:")

    async def test_set_uses_prefix_and_ttl(self, cache, redis_client):
        assert await cache.set("promoted:active", [{"code": "SAVE10"}], ttl=60) is True

        key, ttl, data = redis_client.setex.await_args.args
        assert key == "coupon:promoted:active"
        assert ttl == 60
        assert json.loads(data) == [{"code": "SAVE10"}]

    async def test_get_decodes_json(self, cache, redis_client):
        redis_client.get.return_value = '[{"code": "SAVE10"}]'

        assert await cache.get("promoted:active") == [{"code": "SAVE10"}]

    async def test_redis_errors_are_cache_misses(self, cache, redis_client):
        redis_client.get.side_effect = ConnectionError("down")
        redis_client.setex.side_effect = ConnectionError("down")

        assert await cache.get("promoted:active") is None
        assert await cache.set("promoted:active", []) is False

    async def test_without_client(self):
        cache = SimpleCache(key_prefix="coupon:")

        assert await cache.get("promoted:active") is None
        assert await cache.set("promoted:active", []) is False
