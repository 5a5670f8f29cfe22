"""
报价附件存储
"""

import asyncio
import logging
import os
import uuid
from typing import Protocol

from printshop.core.config import settings

logger = logging.getLogger(__name__)


class FileStorage(Protocol):
    """附件存储接口，返回可访问的文件地址"""

    async def save(self, filename: str, content: bytes) -> str:
        ...


class LocalFileStorage:
    """本地磁盘存储"""

    def __init__(self, base_dir: str = None, url_prefix: str = "/uploads"):
        self.base_dir = base_dir or settings.upload_dir
        self.url_prefix = url_prefix.rstrip("/")

    def _write(self, path: str, content: bytes) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(content)

    async def save(self, filename: str, content: bytes) -> str:
        # 文件名只保留扩展名，避免路径穿越和重名
        extension = os.path.splitext(os.path.basename(filename))[1].lower()
        stored_name = f"{uuid.uuid4().hex}{extension}"
        path = os.path.join(self.base_dir, "quotes", stored_name)

        await asyncio.to_thread(self._write, path, content)
        logger.info(f"报价附件已保存 {stored_name} ({len(content)} bytes)")
        return f"{self.url_prefix}/quotes/{stored_name}"
