"""
Rule-based improvement insights.

Rules run in a fixed order and each adds at most one insight:
engagement, posting cadence, content mix, overall score.
"""
from typing import List

from app.engine.statistics import round_half_up
from app.engine.types import BenchmarkBaseline, Insight, ProfileMetrics

LOW_RATIO = 0.7
HIGH_RATIO = 1.3
MIN_REEL_PERCENTAGE = 30
TOP_TIER_SCORE = 85
LAGGING_SCORE = 60


def _engagement_insight(profile: ProfileMetrics, baseline: BenchmarkBaseline):
    rate = profile.engagement_rate
    avg = baseline.avg_engagement
    if not avg:
        return None
    if rate < avg * LOW_RATIO:
        return Insight(
            type='warning',
            category='engagement',
            message=f"Your engagement rate ({rate:.1f}%) is below average for your industry",
            recommendation='Add CTAs to every post and ask questions to boost comments by 40-60%',
        )
    if rate > avg * HIGH_RATIO:
        above = round_half_up((rate / avg - 1) * 100)
        return Insight(
            type='success',
            category='engagement',
            message=f"Excellent engagement rate! You're {above}% above average",
            recommendation='Keep doing what you are doing and consider sharing your strategy',
        )
    return None


def _frequency_insight(profile: ProfileMetrics, baseline: BenchmarkBaseline):
    freq = profile.post_frequency
    avg = baseline.avg_post_frequency
    if freq < avg * LOW_RATIO:
        return Insight(
            type='warning',
            category='frequency',
            message=(f"You're posting less frequently than competitors "
                     f"({freq:.1f}/week vs {avg:.1f}/week)"),
            recommendation=(f"Increase posting frequency by 2-3 posts per week "
                            f"to reach {round_half_up(avg)} posts/week"),
        )
    return None


def _content_insight(profile: ProfileMetrics):
    if profile.reel_percentage < MIN_REEL_PERCENTAGE:
        return Insight(
            type='info',
            category='content',
            message='Reels make up less than 30% of your content',
            recommendation='Reels typically get 3.2x more engagement - aim for 40-60% Reels',
        )
    return None


def _overall_insight(score: int):
    if score >= TOP_TIER_SCORE:
        return Insight(
            type='success',
            category='overall',
            message='You are crushing it! Top-tier performance in your niche',
            recommendation='Focus on maintaining consistency and consider monetization opportunities',
        )
    if score < LAGGING_SCORE:
        return Insight(
            type='warning',
            category='overall',
            message='Your competitors are outpacing you',
            recommendation='Focus on engagement, post frequency, and leveraging trending content',
        )
    return None


def generate_insights(profile: ProfileMetrics, baseline: BenchmarkBaseline, score: int) -> List[Insight]:
    candidates = [
        _engagement_insight(profile, baseline),
        _frequency_insight(profile, baseline),
        _content_insight(profile),
        _overall_insight(score),
    ]
    return [insight for insight in candidates if insight is not None]
