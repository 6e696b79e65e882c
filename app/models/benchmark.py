"""
Benchmark model — cached per-segment baseline (averages + raw distributions).

One row per (industry, location_type, location_value); refreshed in place when
stale, never deleted by the engine.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, JSON, UniqueConstraint
from sqlalchemy.sql import func

from app.database import Base


class Benchmark(Base):
    __tablename__ = 'benchmarks'
    __table_args__ = (
        UniqueConstraint('industry', 'location_type', 'location_value',
                         name='uq_benchmark_segment'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    industry = Column(Text, nullable=False)
    location_type = Column(Text, nullable=False)   # city / state / country / global
    location_value = Column(Text, nullable=True)

    avg_followers = Column(Float, default=0.0)
    avg_engagement = Column(Float, default=0.0)
    avg_post_frequency = Column(Float, default=0.0)
    avg_reel_percentage = Column(Float, default=0.0)

    follower_distribution = Column(JSON, nullable=True)
    engagement_distribution = Column(JSON, nullable=True)

    sample_size = Column(Integer, default=0)
    last_calculated = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
