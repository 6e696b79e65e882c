"""
Analyze use case — profile + segment in, score/benchmarks/rankings/insights out.

Pure orchestration of the engine modules. The only side effect is the
resolver's conditional baseline upsert.
"""
import logging
from datetime import datetime
from typing import Mapping, Optional

from app.engine.defaults import IndustryDefaults
from app.engine.insights import generate_insights
from app.engine.interfaces import BaselineStore, PeerCorpus
from app.engine.ranking import RankCalculator
from app.engine.resolver import BenchmarkResolver
from app.engine.scoring import score_profile
from app.engine.types import AnalysisResult, Segment, utcnow

logger = logging.getLogger('engine.analyzer')


class Analyzer:

    def __init__(self, corpus: PeerCorpus, store: BaselineStore,
                 defaults: Mapping[str, IndustryDefaults]):
        self.corpus = corpus
        self.resolver = BenchmarkResolver(corpus, store, defaults)
        self.ranker = RankCalculator(corpus)

    def analyze(self, profile_id: str, segment: Segment,
                now: Optional[datetime] = None) -> AnalysisResult:
        now = now or utcnow()
        logger.info("Analyzing @%s (%s) in %s", profile_id, segment.industry,
                    segment.city or 'unknown location')

        profile = self.corpus.fetch_profile(profile_id)
        baseline = self.resolver.resolve(segment, now)
        rankings = self.ranker.rank(profile_id, segment, metrics=profile.metrics)
        score = score_profile(profile.metrics, baseline)
        insights = generate_insights(profile.metrics, baseline, score.overall)

        logger.info("Analysis complete for @%s: score %d/100, city rank #%d/%d",
                    profile_id, score.overall, rankings.city.rank, rankings.city.total)

        return AnalysisResult(
            profile=profile,
            score=score,
            benchmarks=baseline,
            rankings=rankings,
            insights=insights,
        )
