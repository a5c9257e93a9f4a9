"""数据库连接模块"""
from __future__ import annotations

from typing import Any
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from enrollment_api.app.common.log import logger


class Base(DeclarativeBase):
    """数据库基类"""
    pass


def _engine_options(database_url: str, echo: bool) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # 等待写锁而不是立即失败
        options["connect_args"] = {"timeout": 15}
    else:
        options.update(pool_recycle=3600, pool_size=10, max_overflow=20)
    return options


def create_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """创建异步引擎"""
    return create_async_engine(database_url, **_engine_options(database_url, echo))


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """创建会话工厂"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def init_db(engine: AsyncEngine):
    """初始化数据库"""
    # 注册模型到元数据
    from enrollment_api.app.enroll import model  # noqa: F401

    try:
        async with engine.begin() as conn:
            # 创建所有表
            await conn.run_sync(Base.metadata.create_all)
            logger.info("数据库表创建成功")
    except Exception as e:
        logger.error(f"数据库初始化失败: {str(e)}")
        raise


# 导出
__all__ = ["Base", "create_engine", "create_session_factory", "init_db"]
