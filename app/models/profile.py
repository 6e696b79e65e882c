"""
Profile model — one row per scraped account, deduplicated by username.

Rows are written by the acquisition side; the benchmark engine only reads them.
"""
from sqlalchemy import Column, Integer, Float, Text, Boolean, DateTime, Index
from sqlalchemy.sql import func

from app.database import Base


class Profile(Base):
    __tablename__ = 'profiles'
    __table_args__ = (
        Index('idx_profiles_industry', 'industry'),
        Index('idx_profiles_location', 'location_city', 'location_state', 'location_country'),
        Index('idx_profiles_scraped', 'last_scraped'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    full_name = Column(Text, nullable=True)
    profile_pic_url = Column(Text, nullable=True)
    followers = Column(Integer, default=0)
    following = Column(Integer, default=0)
    posts = Column(Integer, default=0)
    engagement_rate = Column(Float, default=0.0)   # percent
    avg_likes = Column(Integer, default=0)
    avg_comments = Column(Integer, default=0)
    avg_views = Column(Integer, default=0)
    verified = Column(Boolean, default=False)
    biography = Column(Text, nullable=True)
    external_url = Column(Text, nullable=True)
    business_category = Column(Text, nullable=True)

    # Segmentation
    industry = Column(Text, nullable=True)
    location_city = Column(Text, nullable=True)
    location_state = Column(Text, nullable=True)
    location_country = Column(Text, nullable=True)

    # Content cadence
    post_frequency = Column(Float, nullable=True)  # posts per week
    reel_percentage = Column(Integer, default=0)

    last_scraped = Column(DateTime(timezone=True), server_default=func.now())
    scrape_count = Column(Integer, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
