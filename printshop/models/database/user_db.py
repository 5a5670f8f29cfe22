"""
用户数据库模型 (只用于通知收件人解析)
"""

from datetime import datetime

from sqlalchemy import Column, String, DateTime
from printshop.core.database import Base


class UserDB(Base):
    """用户数据库表"""

    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True, comment="用户ID")
    email = Column(String(255), nullable=False, unique=True, index=True, comment="邮箱")
    name = Column(String(200), comment="姓名")
    locale = Column(String(5), default="en", comment="偏好语言")
    created_at = Column(DateTime, default=datetime.now, comment="创建时间")

    __table_args__ = (
        {'comment': '用户表'}
    )
