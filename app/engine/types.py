"""
Engine value types.

Everything that crosses a seam of the benchmark engine is one of these frozen
dataclasses. Rows and request bodies are parsed into them at the boundary so
the engine never reaches into raw dicts or ORM objects.
"""
import json
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.engine.statistics import round_half_up

LOCATION_TYPES = ('city', 'state', 'country', 'global')
INSIGHT_TYPES = ('success', 'warning', 'info')
INSIGHT_CATEGORIES = ('engagement', 'frequency', 'content', 'overall')


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProfileMetrics:
    """Immutable metric snapshot of one account."""
    followers: int
    engagement_rate: float      # percent
    post_frequency: float       # posts per week
    reel_percentage: int        # 0-100

    def __post_init__(self):
        if self.followers < 0:
            raise ValueError(f"followers must be non-negative, got {self.followers}")
        if self.post_frequency < 0:
            raise ValueError(f"post_frequency must be non-negative, got {self.post_frequency}")
        if not 0 <= self.reel_percentage <= 100:
            raise ValueError(f"reel_percentage must be within 0-100, got {self.reel_percentage}")
        object.__setattr__(self, 'engagement_rate', float(self.engagement_rate))
        object.__setattr__(self, 'post_frequency', float(self.post_frequency))

    @classmethod
    def from_row(cls, row) -> 'ProfileMetrics':
        """Build from a profiles row (ORM object or mapping). Missing numbers count as 0."""
        get = row.get if isinstance(row, dict) else lambda k: getattr(row, k, None)
        return cls(
            followers=int(get('followers') or 0),
            engagement_rate=float(get('engagement_rate') or 0),
            post_frequency=float(get('post_frequency') or 0),
            reel_percentage=int(get('reel_percentage') or 0),
        )


@dataclass(frozen=True)
class Segment:
    """Peer-population key. Location fields are OR-filters when building a corpus."""
    industry: str
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    def __post_init__(self):
        if not self.industry or not str(self.industry).strip():
            raise ValueError("industry is required")

    def location_for(self, scope: str) -> Optional[str]:
        return {'city': self.city, 'state': self.state, 'national': self.country}[scope]


@dataclass(frozen=True)
class PeerMetrics:
    """One corpus member: its metrics plus where it sits."""
    metrics: ProfileMetrics
    segment: Segment


@dataclass(frozen=True)
class ProfileSummary:
    """Display fields of the analyzed account."""
    username: str
    metrics: ProfileMetrics
    segment: Optional[Segment] = None
    full_name: Optional[str] = None
    profile_pic_url: Optional[str] = None
    following: int = 0
    posts: int = 0
    avg_likes: int = 0
    avg_comments: int = 0
    verified: bool = False
    biography: Optional[str] = None
    external_url: Optional[str] = None
    last_scraped: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'username': self.username,
            'fullName': self.full_name,
            'profilePicUrl': self.profile_pic_url,
            'followers': self.metrics.followers,
            'following': self.following,
            'posts': self.posts,
            'engagementRate': self.metrics.engagement_rate,
            'avgLikes': self.avg_likes,
            'avgComments': self.avg_comments,
            'verified': self.verified,
            'biography': self.biography,
            'externalUrl': self.external_url,
            'postFrequency': self.metrics.post_frequency,
            'reelPercentage': self.metrics.reel_percentage,
        }


@dataclass(frozen=True)
class Distribution:
    """
    Multiset of raw samples for one metric.

    Insertion order is kept only so a stored distribution round-trips
    unchanged; statistics always work on sorted().
    Serialized form is a plain JSON array of numbers.
    """
    values: Tuple[float, ...] = ()

    @classmethod
    def of(cls, samples: Iterable[float]) -> 'Distribution':
        return cls(tuple(float(v) for v in samples))

    @classmethod
    def from_json(cls, raw) -> 'Distribution':
        """Accept a list, a JSON-encoded string, or None."""
        if raw is None:
            return cls()
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        if not isinstance(raw, list):
            raise ValueError(f"distribution must be a JSON array, got {type(raw).__name__}")
        return cls.of(raw)

    def to_json(self) -> List[float]:
        return list(self.values)

    def sorted(self) -> List[float]:
        return sorted(self.values)

    def __iter__(self):
        return iter(self.values)

    def __len__(self):
        return len(self.values)

    def __bool__(self):
        return bool(self.values)


@dataclass(frozen=True)
class BenchmarkBaseline:
    """Per-segment aggregate. sample_size == 0 marks a degraded (defaults) baseline."""
    industry: str
    location_type: str
    location_value: Optional[str]
    avg_followers: float
    avg_engagement: float
    avg_post_frequency: float
    avg_reel_percentage: float = 0.0
    follower_distribution: Distribution = field(default_factory=Distribution)
    engagement_distribution: Distribution = field(default_factory=Distribution)
    sample_size: int = 0
    last_calculated: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.location_type not in LOCATION_TYPES:
            raise ValueError(f"unknown location_type '{self.location_type}'")
        if self.sample_size < 0:
            raise ValueError("sample_size must be non-negative")

    @property
    def key(self) -> Tuple[str, str, Optional[str]]:
        return (self.industry, self.location_type, self.location_value)

    @property
    def is_degraded(self) -> bool:
        return self.sample_size == 0

    def is_fresh(self, now: datetime, max_age: timedelta) -> bool:
        updated = as_utc(self.updated_at)
        if updated is None:
            return False
        return as_utc(now) - updated < max_age

    def summary(self) -> Dict[str, Any]:
        """Public view used by the HTTP envelope."""
        return {
            'industry': self.industry,
            'location': self.location_value,
            'avgFollowers': round_half_up(self.avg_followers),
            'avgEngagement': round(self.avg_engagement, 1),
            'avgPostFrequency': round(self.avg_post_frequency, 1),
            'sampleSize': self.sample_size,
            'degraded': self.is_degraded,
        }


@dataclass(frozen=True)
class RankResult:
    rank: int
    total: int
    name: Optional[str] = None


@dataclass(frozen=True)
class Rankings:
    city: RankResult
    state: RankResult
    national: RankResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'city': {'rank': self.city.rank, 'total': self.city.total, 'name': self.city.name},
            'state': {'rank': self.state.rank, 'total': self.state.total, 'name': self.state.name},
            'national': {'rank': self.national.rank, 'total': self.national.total,
                         'country': self.national.name},
        }


@dataclass(frozen=True)
class LeaderboardEntry:
    position: int
    username: str
    followers: int
    engagement_rate: float


@dataclass(frozen=True)
class ScoreResult:
    overall: int
    follower_percentile: int
    engagement_percentile: int

    def to_dict(self) -> Dict[str, int]:
        return {
            'overall': self.overall,
            'followerPercentile': self.follower_percentile,
            'engagementPercentile': self.engagement_percentile,
        }


@dataclass(frozen=True)
class Insight:
    type: str
    category: str
    message: str
    recommendation: str

    def __post_init__(self):
        if self.type not in INSIGHT_TYPES:
            raise ValueError(f"unknown insight type '{self.type}'")
        if self.category not in INSIGHT_CATEGORIES:
            raise ValueError(f"unknown insight category '{self.category}'")


@dataclass(frozen=True)
class AnalysisResult:
    profile: ProfileSummary
    score: ScoreResult
    benchmarks: BenchmarkBaseline
    rankings: Rankings
    insights: List[Insight]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'profile': self.profile.to_dict(),
            'score': self.score.to_dict(),
            'benchmarks': self.benchmarks.summary(),
            'rankings': self.rankings.to_dict(),
            'insights': [asdict(i) for i in self.insights],
            'scrapedAt': self.profile.last_scraped.isoformat() if self.profile.last_scraped else None,
        }
