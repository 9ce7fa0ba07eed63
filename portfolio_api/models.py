"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from portfolio_api.database import Base

FEED_STATE_ID = 1
GLOBAL_VISITS_IDENTIFIER = "global_site_visits"
# Largest value a 32-bit INTEGER primary key can hold
MAX_IMAGE_ID = 2_147_483_647


class GalleryImage(Base):
    """
    Gallery image model.
    display_order is dense and zero-based across all rows.
    uploader_* columns are a snapshot of the admin profile at creation time.
    """
    __tablename__ = "gallery_images"

    id = Column(Integer, primary_key=True, index=True)
    src = Column(String, nullable=False)
    alt = Column(String, nullable=False)
    caption = Column(String, nullable=False)
    hashtags = Column(JSON, nullable=False, default=list)
    likes = Column(Integer, nullable=False, default=0)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    uploader_name = Column(String, nullable=False)
    uploader_avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class FeedState(Base):
    """
    Single-row table guarding administrative writes to the image feed.
    Bumping revision takes a row lock that serializes creates, reorders and deletes.
    """
    __tablename__ = "feed_state"

    id = Column(Integer, primary_key=True)
    revision = Column(Integer, nullable=False, default=0)


class VisitorCount(Base):
    """Site-wide visit counter."""
    __tablename__ = "visitor_counts"

    id = Column(Integer, primary_key=True)
    identifier = Column(String, nullable=False, unique=True, default=GLOBAL_VISITS_IDENTIFIER)
    count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
