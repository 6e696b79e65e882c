"""
In-memory collaborators — a dict-backed corpus and baseline store.

Same contracts as the SQL adapters in app.services.corpus, without a
database. Used for local experiments and by the engine tests.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from app.engine.errors import ProfileNotFound
from app.engine.interfaces import BaselineStore, PeerCorpus
from app.engine.types import (
    BenchmarkBaseline,
    PeerMetrics,
    ProfileMetrics,
    ProfileSummary,
    Segment,
    as_utc,
    utcnow,
)

_SCOPE_FIELDS = {'city': 'city', 'state': 'state', 'national': 'country'}


def dominates(candidate: ProfileMetrics, subject: ProfileMetrics) -> bool:
    """True when `candidate` ranks strictly ahead of `subject`."""
    if candidate.followers != subject.followers:
        return candidate.followers > subject.followers
    return candidate.engagement_rate > subject.engagement_rate


@dataclass
class CorpusEntry:
    username: str
    metrics: ProfileMetrics
    segment: Segment
    last_scraped: datetime


class InMemoryCorpus(PeerCorpus):

    def __init__(self):
        self.entries: Dict[str, CorpusEntry] = {}

    def add(self, username: str, metrics: ProfileMetrics, segment: Segment,
            last_scraped: Optional[datetime] = None):
        self.entries[username] = CorpusEntry(
            username=username,
            metrics=metrics,
            segment=segment,
            last_scraped=as_utc(last_scraped) or utcnow(),
        )

    def _in_scope(self, scope: str, industry: str, location_value: Optional[str]):
        field_name = _SCOPE_FIELDS[scope]
        if location_value is None:
            return []
        return [
            e for e in self.entries.values()
            if e.segment.industry == industry
            and getattr(e.segment, field_name) == location_value
        ]

    def fetch_peer_metrics(self, industry, city, state, country, max_age_days, now) -> List[PeerMetrics]:
        cutoff = as_utc(now) - timedelta(days=max_age_days)

        def matches(segment):
            return any(
                wanted is not None and actual == wanted
                for wanted, actual in ((city, segment.city), (state, segment.state),
                                       (country, segment.country))
            )

        return [
            PeerMetrics(metrics=e.metrics, segment=e.segment)
            for e in self.entries.values()
            if e.segment.industry == industry and matches(e.segment) and e.last_scraped > cutoff
        ]

    def fetch_profile_metrics(self, profile_id: str) -> ProfileMetrics:
        return self.fetch_profile(profile_id).metrics

    def fetch_profile(self, profile_id: str) -> ProfileSummary:
        entry = self.entries.get(profile_id)
        if entry is None:
            raise ProfileNotFound(profile_id)
        return ProfileSummary(
            username=entry.username,
            metrics=entry.metrics,
            segment=entry.segment,
            last_scraped=entry.last_scraped,
        )

    def count_in_scope(self, scope, industry, location_value, dominating=None) -> int:
        members = self._in_scope(scope, industry, location_value)
        if dominating is not None:
            members = [e for e in members if dominates(e.metrics, dominating)]
        return len(members)

    def top_in_scope(self, scope, industry, location_value, limit) -> List[Tuple[str, ProfileMetrics]]:
        members = sorted(
            self._in_scope(scope, industry, location_value),
            key=lambda e: (-e.metrics.followers, -e.metrics.engagement_rate, e.username),
        )
        return [(e.username, e.metrics) for e in members[:limit]]


class InMemoryBaselineStore(BaselineStore):

    def __init__(self):
        self.rows: Dict[Tuple[str, str, Optional[str]], BenchmarkBaseline] = {}
        self.upserts = 0

    def load_baseline(self, industry, location_type, location_value) -> Optional[BenchmarkBaseline]:
        return self.rows.get((industry, location_type, location_value))

    def upsert_baseline(self, baseline: BenchmarkBaseline) -> BenchmarkBaseline:
        stamp = baseline.updated_at or utcnow()
        existing = self.rows.get(baseline.key)
        last_calculated = existing.last_calculated if existing else (baseline.last_calculated or stamp)
        stored = replace(baseline, updated_at=stamp, last_calculated=last_calculated)
        self.rows[baseline.key] = stored
        self.upserts += 1
        return stored
