from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..utils.datetime import utcnow
from .base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class SiteRecord(Base):
    __tablename__ = "sites"

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False)
    internal_name = Column(String, nullable=False)
    data = Column(Text, nullable=False)
    is_published = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    contacts = relationship("ContactRecord", back_populates="site", cascade="all, delete-orphan")
    analytics = relationship("AnalyticsRecord", back_populates="site", cascade="all, delete-orphan")

    __table_args__ = (Index("ix_sites_user_created", "user_id", "created_at"),)


class ContactRecord(Base):
    __tablename__ = "contacts"

    id = Column(String, primary_key=True, default=_new_id)
    site_id = Column(String, ForeignKey("sites.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String)
    message = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    site = relationship("SiteRecord", back_populates="contacts")

    __table_args__ = (Index("ix_contacts_user_created", "user_id", "created_at"),)


class AnalyticsRecord(Base):
    __tablename__ = "analytics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    site_id = Column(String, ForeignKey("sites.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    views = Column(Integer, nullable=False, default=0)
    clicks = Column(Integer, nullable=False, default=0)
    saves = Column(Integer, nullable=False, default=0)

    site = relationship("SiteRecord", back_populates="analytics")

    __table_args__ = (UniqueConstraint("site_id", "date", name="uq_analytics_site_date"),)


__all__ = ["AnalyticsRecord", "ContactRecord", "SiteRecord"]
