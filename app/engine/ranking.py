"""
Geographic rankings — ordinal position of an account within city, state and
national peer scopes.

Ordering is (followers desc, engagement desc). Accounts tied on both share a
rank number since neither is counted as ahead of the other.
"""
import logging
from typing import List, Optional

from app.config import (
    LEADERBOARD_MAX_LIMIT,
    RANK_SCOPES,
    RANK_TOTAL_FALLBACKS,
)
from app.engine.interfaces import PeerCorpus
from app.engine.types import LeaderboardEntry, ProfileMetrics, RankResult, Rankings, Segment

logger = logging.getLogger('engine.ranking')


class RankCalculator:

    def __init__(self, corpus: PeerCorpus):
        self.corpus = corpus

    def rank(self, profile_id: str, segment: Segment,
             metrics: Optional[ProfileMetrics] = None) -> Rankings:
        """
        Rank `profile_id` in every scope of `segment`.

        The subject must exist in the corpus (ProfileNotFound otherwise).
        `metrics` skips the lookup when the caller already holds them.
        """
        if metrics is None:
            metrics = self.corpus.fetch_profile_metrics(profile_id)

        results = {
            scope: self.rank_in_scope(scope, segment.industry, segment.location_for(scope), metrics)
            for scope in RANK_SCOPES
        }
        return Rankings(**results)

    def rank_in_scope(self, scope: str, industry: str, location_value: Optional[str],
                      metrics: ProfileMetrics) -> RankResult:
        ahead = self.corpus.count_in_scope(scope, industry, location_value, dominating=metrics)
        total = self.corpus.count_in_scope(scope, industry, location_value)
        if total == 0:
            total = RANK_TOTAL_FALLBACKS[scope]
        return RankResult(rank=ahead + 1, total=total, name=location_value)

    def leaderboard(self, scope: str, industry: str, location_value: Optional[str],
                    limit: int = 10) -> List[LeaderboardEntry]:
        """
        Top accounts of one scope with their 1-based positions.

        Positions follow the same rule as rank(): tied accounts share a
        position and the next distinct account skips ahead (1, 2, 2, 4).
        """
        if scope not in RANK_SCOPES:
            raise ValueError(f"unknown scope '{scope}'")
        limit = max(1, min(limit, LEADERBOARD_MAX_LIMIT))
        rows = self.corpus.top_in_scope(scope, industry, location_value, limit)

        entries = []
        previous_key = None
        position = 0
        for index, (username, metrics) in enumerate(rows, start=1):
            key = (metrics.followers, metrics.engagement_rate)
            if key != previous_key:
                position = index
                previous_key = key
            entries.append(LeaderboardEntry(
                position=position,
                username=username,
                followers=metrics.followers,
                engagement_rate=metrics.engagement_rate,
            ))
        return entries
