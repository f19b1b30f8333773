"""
SQLite database configuration and ORM models.

Each table stores one kind of document; ids are UUID strings.
"""

from functools import lru_cache
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from portal.core.config import get_settings
from portal.utils.datetime_utils import storage_now


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class AppORM(Base):
    """App ORM model."""

    __tablename__ = "apps"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=storage_now)
    updated_at = Column(DateTime, default=storage_now, onupdate=storage_now)


class AchievementListORM(Base):
    """AchievementList ORM model."""

    __tablename__ = "achievement_lists"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    app_id = Column(String(36), ForeignKey("apps.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    # Member ids, rewritten in `order` sequence on every mutation
    achievement_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=storage_now)
    updated_at = Column(DateTime, default=storage_now, onupdate=storage_now)


class AchievementORM(Base):
    """Achievement ORM model."""

    __tablename__ = "achievements"
    __table_args__ = (Index("ix_achievements_list_order", "list_id", "order"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    list_id = Column(String(36), ForeignKey("achievement_lists.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(20), nullable=False)
    progress_goal = Column(Integer, nullable=False, default=1)
    is_hidden = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(1000), nullable=False, default="")
    order = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=storage_now)
    updated_at = Column(DateTime, default=storage_now, onupdate=storage_now)


class ApiKeyORM(Base):
    """API key ORM model."""

    __tablename__ = "api_keys"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    key = Column(String(128), nullable=False, unique=True, index=True)
    list_id = Column(String(36), ForeignKey("achievement_lists.id"), nullable=False, index=True)
    app_id = Column(String(36), ForeignKey("apps.id"), nullable=False)
    exp_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=storage_now)


class PlayerORM(Base):
    """Player ORM model."""

    __tablename__ = "players"
    __table_args__ = (UniqueConstraint("app_id", "player_id", name="uq_players_app_player"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    app_id = Column(String(36), ForeignKey("apps.id"), nullable=False, index=True)
    player_id = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=storage_now)
    updated_at = Column(DateTime, default=storage_now, onupdate=storage_now)


class PlayerProgressORM(Base):
    """Progress sub-record: one row per (player, achievement)."""

    __tablename__ = "player_progress"
    __table_args__ = (
        UniqueConstraint("player_ref", "achievement_id", name="uq_progress_player_achievement"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    player_ref = Column(String(36), ForeignKey("players.id"), nullable=False, index=True)
    achievement_id = Column(String(36), nullable=False, index=True)
    progress = Column(Integer, nullable=False, default=0)
    date_unlocked = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=storage_now)


# ===========================================
# Database Session Management
# ===========================================


@lru_cache()
def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=False)


def get_session_factory():
    """Get async session factory."""
    engine = get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine=None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
