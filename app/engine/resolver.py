"""
Benchmark resolver — cached segment baselines with a defaults fallback.

Lookup order for a segment:
  1. stored city baseline updated within BENCHMARK_FRESHNESS_HOURS → returned as-is
  2. peers scraped within CORPUS_MAX_AGE_DAYS → averaged, upserted, returned
  3. no peers → degraded baseline from the industry defaults table (not stored)

Segments without a city bypass the cache entirely and are always aggregated.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Mapping, Optional

from app.config import BENCHMARK_FRESHNESS_HOURS, CORPUS_MAX_AGE_DAYS
from app.engine.defaults import IndustryDefaults, defaults_for
from app.engine.interfaces import BaselineStore, PeerCorpus
from app.engine.statistics import mean
from app.engine.types import (
    BenchmarkBaseline,
    Distribution,
    PeerMetrics,
    Segment,
    utcnow,
)

logger = logging.getLogger('engine.resolver')

FRESHNESS_WINDOW = timedelta(hours=BENCHMARK_FRESHNESS_HOURS)

# Baselines are cached at city granularity
CACHE_LOCATION_TYPE = 'city'


def degraded_baseline(segment: Segment, defaults: IndustryDefaults) -> BenchmarkBaseline:
    """Defaults-table baseline: averages only, no distributions, sample_size 0."""
    return BenchmarkBaseline(
        industry=segment.industry,
        location_type=CACHE_LOCATION_TYPE,
        location_value=segment.city,
        avg_followers=defaults.avg_followers,
        avg_engagement=defaults.avg_engagement,
        avg_post_frequency=defaults.avg_post_frequency,
    )


def aggregate_peers(segment: Segment, peers: List[PeerMetrics],
                    now: Optional[datetime] = None) -> BenchmarkBaseline:
    """
    Average a non-empty peer list into a baseline.

    Averages are rounded to 2 dp, matching the stored precision, so a cache
    hit and a fresh computation return the same numbers. Distributions keep
    one raw value per peer in corpus order.
    """
    metrics = [p.metrics for p in peers]
    return BenchmarkBaseline(
        industry=segment.industry,
        location_type=CACHE_LOCATION_TYPE,
        location_value=segment.city,
        avg_followers=round(mean(m.followers for m in metrics), 2),
        avg_engagement=round(mean(m.engagement_rate for m in metrics), 2),
        avg_post_frequency=round(mean(m.post_frequency for m in metrics), 2),
        avg_reel_percentage=round(mean(m.reel_percentage for m in metrics), 2),
        follower_distribution=Distribution.of(m.followers for m in metrics),
        engagement_distribution=Distribution.of(m.engagement_rate for m in metrics),
        sample_size=len(metrics),
        last_calculated=now,
        updated_at=now,
    )


class BenchmarkResolver:
    """Resolves a segment's baseline. Stateless apart from its collaborators."""

    def __init__(self, corpus: PeerCorpus, store: BaselineStore,
                 defaults: Mapping[str, IndustryDefaults]):
        self.corpus = corpus
        self.store = store
        self.defaults = defaults

    def resolve(self, segment: Segment, now: Optional[datetime] = None) -> BenchmarkBaseline:
        now = now or utcnow()

        # The cache is keyed by city; without one the key would collide across states
        if segment.city is None:
            return self.recompute(segment, now)

        cached = self.store.load_baseline(segment.industry, CACHE_LOCATION_TYPE, segment.city)
        if cached is not None and cached.is_fresh(now, FRESHNESS_WINDOW):
            logger.info("Using cached benchmarks for %s in %s", segment.industry, segment.city)
            return cached

        logger.info("Calculating fresh benchmarks for %s in %s", segment.industry, segment.city)
        return self.recompute(segment, now)

    def recompute(self, segment: Segment, now: Optional[datetime] = None) -> BenchmarkBaseline:
        """
        Aggregate the current corpus for `segment`, bypassing the cache.

        The result is stored only when the segment has a city to key it by.
        """
        now = now or utcnow()
        peers = self.corpus.fetch_peer_metrics(
            segment.industry, segment.city, segment.state, segment.country,
            CORPUS_MAX_AGE_DAYS, now,
        )

        if not peers:
            logger.info("No peers for %s near %s, using industry defaults",
                        segment.industry, segment.city)
            return degraded_baseline(segment, defaults_for(self.defaults, segment.industry))

        baseline = aggregate_peers(segment, peers, now)
        if segment.city is None:
            return baseline
        stored = self.store.upsert_baseline(baseline)
        logger.debug("Stored baseline %s (sample_size=%d)", stored.key, stored.sample_size)
        return stored
