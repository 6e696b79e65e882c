"""
Overall performance score (0-100) against a segment baseline.

Weighted scoring:
  30%: followers vs benchmark
  50%: engagement rate vs benchmark
  20%: post frequency vs benchmark

Each component is the profile/benchmark ratio as a percentage, capped at 100.
A zero benchmark average contributes 0 rather than a division error.
"""
from app.engine.statistics import percentile, round_half_up
from app.engine.types import BenchmarkBaseline, ProfileMetrics, ScoreResult

WEIGHTS = {
    'followers': 0.3,
    'engagement': 0.5,
    'post_frequency': 0.2,
}


def component_score(value: float, benchmark: float) -> float:
    if not benchmark:
        return 0.0
    return min(100.0, value / benchmark * 100)


def calculate_overall_score(profile: ProfileMetrics, baseline: BenchmarkBaseline) -> int:
    follower_score = component_score(profile.followers, baseline.avg_followers)
    engagement_score = component_score(profile.engagement_rate, baseline.avg_engagement)
    post_score = component_score(profile.post_frequency, baseline.avg_post_frequency)

    overall = round_half_up(
        follower_score * WEIGHTS['followers']
        + engagement_score * WEIGHTS['engagement']
        + post_score * WEIGHTS['post_frequency']
    )
    return min(100, max(0, overall))


def score_profile(profile: ProfileMetrics, baseline: BenchmarkBaseline) -> ScoreResult:
    """Overall score plus percentile positions within the baseline distributions."""
    return ScoreResult(
        overall=calculate_overall_score(profile, baseline),
        follower_percentile=percentile(profile.followers, baseline.follower_distribution),
        engagement_percentile=percentile(profile.engagement_rate, baseline.engagement_distribution),
    )
