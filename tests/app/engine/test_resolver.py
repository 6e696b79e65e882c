"""Tests for app.engine.resolver — cache freshness, aggregation, defaults fallback."""
import pytest
from datetime import timedelta
from unittest.mock import MagicMock

from app.engine.errors import TransientStoreError
from app.engine.interfaces import PeerCorpus
from app.engine.resolver import BenchmarkResolver, aggregate_peers
from app.engine.types import Distribution, Segment


@pytest.fixture
def resolver(seeded_corpus, store, industry_defaults):
    return BenchmarkResolver(seeded_corpus, store, industry_defaults)


def _cached(make_baseline, updated_at, **overrides):
    return make_baseline(avg_followers=1.0, avg_engagement=1.0, avg_post_frequency=1.0,
                         sample_size=7, updated_at=updated_at, **overrides)


# ---------------------------------------------------------------------------
# cache
# ---------------------------------------------------------------------------

class TestCache:

    def test_fresh_cached_baseline_returned_unchanged(self, resolver, store, make_baseline,
                                                      austin_segment, now):
        cached = _cached(make_baseline, now - timedelta(hours=23))
        store.rows[cached.key] = cached

        assert resolver.resolve(austin_segment, now) is cached
        assert store.upserts == 0

    def test_stale_cached_baseline_recomputed(self, resolver, store, make_baseline,
                                              austin_segment, now):
        cached = _cached(make_baseline, now - timedelta(hours=25))
        store.rows[cached.key] = cached

        result = resolver.resolve(austin_segment, now)
        assert result.sample_size == 5
        assert store.upserts == 1
        assert store.rows[cached.key].updated_at == now

    def test_exactly_24_hours_is_stale(self, resolver, store, make_baseline, austin_segment, now):
        cached = _cached(make_baseline, now - timedelta(hours=24))
        store.rows[cached.key] = cached

        assert resolver.resolve(austin_segment, now) is not cached

    def test_city_less_segments_never_share_a_baseline(self, corpus, store, industry_defaults,
                                                       make_metrics, now):
        recent = now - timedelta(days=1)
        corpus.add('sf_runner', make_metrics(followers=1000),
                   Segment(industry='fitness', city='San Francisco', state='CA', country='US'),
                   last_scraped=recent)
        corpus.add('nyc_lifter', make_metrics(followers=900000),
                   Segment(industry='fitness', city='New York', state='NY', country='MX'),
                   last_scraped=recent)
        resolver = BenchmarkResolver(corpus, store, industry_defaults)

        ca = resolver.resolve(Segment(industry='fitness', state='CA', country='CA'), now)
        ny = resolver.resolve(Segment(industry='fitness', state='NY', country='CA'),
                              now + timedelta(minutes=1))

        assert ca.avg_followers == 1000
        assert ny.avg_followers == 900000
        assert store.upserts == 0

    def test_city_less_segment_ignores_stored_null_row(self, resolver, store, make_baseline, now):
        cached = _cached(make_baseline, now, location_value=None)
        store.rows[cached.key] = cached

        result = resolver.resolve(Segment(industry='fitness', state='TX'), now)
        assert result is not cached
        assert result.sample_size == 5

    def test_cache_is_keyed_by_city(self, resolver, store, make_baseline, austin_segment, now):
        other = _cached(make_baseline, now, location_value='Dallas')
        store.rows[other.key] = other

        result = resolver.resolve(austin_segment, now)
        assert result.location_value == 'Austin'
        assert result.sample_size == 5


# ---------------------------------------------------------------------------
# recomputation
# ---------------------------------------------------------------------------

class TestRecompute:

    def test_averages_over_recent_peers(self, resolver, austin_segment, now):
        result = resolver.resolve(austin_segment, now)
        # stale oldschool_gains and the beauty account are excluded
        assert result.sample_size == 5
        assert result.avg_followers == 34637.2
        assert result.avg_engagement == 2.89
        assert result.avg_post_frequency == 5.24
        assert result.avg_reel_percentage == 42.0
        assert result.location_type == 'city'
        assert not result.is_degraded

    def test_distributions_hold_one_raw_value_per_peer(self, resolver, austin_segment, now):
        result = resolver.resolve(austin_segment, now)
        assert result.follower_distribution.to_json() == [12543, 48200, 8900, 12543, 91000]
        assert sorted(result.engagement_distribution.to_json()) == [1.6, 2.1, 2.75, 3.2, 4.8]

    def test_location_fields_are_or_filters(self, resolver, now):
        # no city match, but the state matches every TX peer
        result = resolver.resolve(Segment(industry='fitness', city='Houston', state='TX'), now)
        assert result.sample_size == 5
        assert result.location_value == 'Houston'

    def test_recompute_is_idempotent(self, resolver, store, austin_segment, now):
        first = resolver.recompute(austin_segment, now)
        second = resolver.recompute(austin_segment, now + timedelta(minutes=5))

        assert len(store.rows) == 1
        assert first.avg_followers == second.avg_followers
        assert first.avg_engagement == second.avg_engagement
        assert first.follower_distribution == second.follower_distribution
        assert first.engagement_distribution == second.engagement_distribution
        assert second.last_calculated == first.last_calculated

    def test_aggregate_peers_rounds_to_two_places(self, make_metrics, now):
        from app.engine.types import PeerMetrics
        seg = Segment(industry='food', city='Reno')
        peers = [PeerMetrics(make_metrics(followers=f), seg) for f in (1, 1, 2)]
        assert aggregate_peers(seg, peers, now).avg_followers == 1.33


# ---------------------------------------------------------------------------
# degraded baseline
# ---------------------------------------------------------------------------

class TestDefaultsFallback:

    def test_unknown_industry_uses_default_row(self, resolver, store, now):
        result = resolver.resolve(Segment(industry='kayaking', city='Bend'), now)
        assert result.avg_followers == 15000
        assert result.avg_engagement == 3.0
        assert result.avg_post_frequency == 5.0
        assert result.sample_size == 0
        assert result.is_degraded
        assert result.follower_distribution == Distribution()
        assert store.upserts == 0

    def test_known_industry_uses_its_row(self, resolver, now):
        segment = Segment(industry='beauty', city='Boise', state='ID', country='CA')
        result = resolver.resolve(segment, now)
        assert (result.avg_followers, result.avg_engagement, result.avg_post_frequency) == \
            (25000, 4.2, 7.5)

    def test_segment_without_location_matches_nobody(self, resolver, now):
        result = resolver.resolve(Segment(industry='fitness'), now)
        assert result.is_degraded
        assert result.avg_post_frequency == 5.2


# ---------------------------------------------------------------------------
# failures
# ---------------------------------------------------------------------------

class TestFailures:

    def test_corpus_failure_propagates(self, store, industry_defaults, austin_segment, now):
        corpus = MagicMock(spec=PeerCorpus)
        corpus.fetch_peer_metrics.side_effect = TransientStoreError('fetch_peer_metrics')
        resolver = BenchmarkResolver(corpus, store, industry_defaults)

        with pytest.raises(TransientStoreError):
            resolver.resolve(austin_segment, now)
        assert corpus.fetch_peer_metrics.call_count == 1

    def test_fixed_corpus_window_is_passed(self, store, industry_defaults, austin_segment, now):
        corpus = MagicMock(spec=PeerCorpus)
        corpus.fetch_peer_metrics.return_value = []
        BenchmarkResolver(corpus, store, industry_defaults).resolve(austin_segment, now)

        corpus.fetch_peer_metrics.assert_called_once_with(
            'fitness', 'Austin', 'TX', 'US', 30, now,
        )
