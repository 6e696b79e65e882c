"""
Collaborator contracts for the benchmark engine.

The engine never touches a database directly. It is handed a PeerCorpus
(read side over scraped profiles) and a BaselineStore (benchmark cache);
app.services.corpus provides the SQLAlchemy implementations.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from app.engine.types import (
    BenchmarkBaseline,
    PeerMetrics,
    ProfileMetrics,
    ProfileSummary,
)


class PeerCorpus(ABC):
    """Read access to the corpus of scraped profiles."""

    @abstractmethod
    def fetch_peer_metrics(self, industry: str, city: Optional[str], state: Optional[str],
                           country: Optional[str], max_age_days: int,
                           now: datetime) -> List[PeerMetrics]:
        """
        Members of `industry` matching ANY of the given locations, scraped
        within `max_age_days` of `now`. A None location matches nothing.
        """
        ...

    @abstractmethod
    def fetch_profile_metrics(self, profile_id: str) -> ProfileMetrics:
        """Metrics of one account. Raises ProfileNotFound."""
        ...

    @abstractmethod
    def fetch_profile(self, profile_id: str) -> ProfileSummary:
        """Display record of one account. Raises ProfileNotFound."""
        ...

    @abstractmethod
    def count_in_scope(self, scope: str, industry: str, location_value: Optional[str],
                       dominating: Optional[ProfileMetrics] = None) -> int:
        """
        Members of `industry` whose scope location equals `location_value`.

        With `dominating`, only members ranked strictly ahead of it:
        more followers, or equal followers and higher engagement.
        """
        ...

    @abstractmethod
    def top_in_scope(self, scope: str, industry: str, location_value: Optional[str],
                     limit: int) -> List[Tuple[str, ProfileMetrics]]:
        """(username, metrics) of the best `limit` members, ordered by followers then engagement."""
        ...


class BaselineStore(ABC):
    """Persistent cache of computed baselines."""

    @abstractmethod
    def load_baseline(self, industry: str, location_type: str,
                      location_value: Optional[str]) -> Optional[BenchmarkBaseline]:
        """Stored baseline for the key, fresh or not. None when absent."""
        ...

    @abstractmethod
    def upsert_baseline(self, baseline: BenchmarkBaseline) -> BenchmarkBaseline:
        """
        Overwrite-by-key. Writing the same baseline twice leaves the same row.
        Returns the baseline as stored (with its timestamps).
        """
        ...
