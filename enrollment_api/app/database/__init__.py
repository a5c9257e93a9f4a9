"""数据库模块"""
from __future__ import annotations

from .db import Base, create_engine, create_session_factory, init_db

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "init_db"
]
