# src/trans_batch/infrastructure/db/base.py
"""
定义了 SQLAlchemy 的元数据 (MetaData) 和声明式基类 (DeclarativeBase)。
"""

from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

metadata = MetaData()


class Base(MappedAsDataclass, DeclarativeBase):
    """项目统一的声明式基类，配置为数据类 (`MappedAsDataclass`)。"""

    __abstract__ = True
    metadata = metadata
