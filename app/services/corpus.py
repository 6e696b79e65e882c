"""
SQLAlchemy-backed engine collaborators — profiles corpus + benchmarks cache.

Every database error is logged and re-raised as TransientStoreError; nothing
is retried here except the single merge retry in upsert_baseline when a
concurrent writer inserts the same key first.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.database import get_session
from app.engine.errors import ProfileNotFound, TransientStoreError
from app.engine.interfaces import BaselineStore, PeerCorpus
from app.engine.types import (
    BenchmarkBaseline,
    Distribution,
    PeerMetrics,
    ProfileMetrics,
    ProfileSummary,
    Segment,
    as_utc,
    utcnow,
)
from app.models.benchmark import Benchmark
from app.models.profile import Profile

logger = logging.getLogger('services.corpus')

_SCOPE_COLUMNS = {
    'city': Profile.location_city,
    'state': Profile.location_state,
    'national': Profile.location_country,
}


def _scope_column(scope):
    try:
        return _SCOPE_COLUMNS[scope]
    except KeyError:
        raise ValueError(f"unknown scope '{scope}'") from None


def profile_to_summary(row: Profile) -> ProfileSummary:
    segment = Segment(
        industry=row.industry,
        city=row.location_city,
        state=row.location_state,
        country=row.location_country,
    ) if row.industry else None
    return ProfileSummary(
        username=row.username,
        metrics=ProfileMetrics.from_row(row),
        segment=segment,
        full_name=row.full_name,
        profile_pic_url=row.profile_pic_url,
        following=row.following or 0,
        posts=row.posts or 0,
        avg_likes=row.avg_likes or 0,
        avg_comments=row.avg_comments or 0,
        verified=bool(row.verified),
        biography=row.biography,
        external_url=row.external_url,
        last_scraped=as_utc(row.last_scraped),
    )


def benchmark_to_baseline(row: Benchmark) -> BenchmarkBaseline:
    return BenchmarkBaseline(
        industry=row.industry,
        location_type=row.location_type,
        location_value=row.location_value,
        avg_followers=float(row.avg_followers or 0),
        avg_engagement=float(row.avg_engagement or 0),
        avg_post_frequency=float(row.avg_post_frequency or 0),
        avg_reel_percentage=float(row.avg_reel_percentage or 0),
        follower_distribution=Distribution.from_json(row.follower_distribution),
        engagement_distribution=Distribution.from_json(row.engagement_distribution),
        sample_size=row.sample_size or 0,
        last_calculated=as_utc(row.last_calculated),
        updated_at=as_utc(row.updated_at),
    )


class SqlPeerCorpus(PeerCorpus):
    """Reads the profiles table."""

    def fetch_peer_metrics(self, industry: str, city: Optional[str], state: Optional[str],
                           country: Optional[str], max_age_days: int,
                           now: datetime) -> List[PeerMetrics]:
        # A NULL location compares unknown in SQL, so it never selects anyone
        location_filters = [
            column == value
            for column, value in (
                (Profile.location_city, city),
                (Profile.location_state, state),
                (Profile.location_country, country),
            )
            if value is not None
        ]
        if not location_filters:
            return []

        cutoff = now - timedelta(days=max_age_days)
        session = get_session()
        try:
            rows = session.query(Profile).filter(
                Profile.industry == industry,
                or_(*location_filters),
                Profile.last_scraped > cutoff,
            ).order_by(Profile.id).all()

            return [
                PeerMetrics(
                    metrics=ProfileMetrics.from_row(row),
                    segment=Segment(
                        industry=row.industry,
                        city=row.location_city,
                        state=row.location_state,
                        country=row.location_country,
                    ),
                )
                for row in rows
            ]
        except SQLAlchemyError as e:
            logger.error("Failed to fetch peers for %s", industry, exc_info=True)
            raise TransientStoreError('fetch_peer_metrics', e) from e
        finally:
            session.close()

    def _load_profile(self, profile_id: str) -> Profile:
        session = get_session()
        try:
            row = session.query(Profile).filter(Profile.username == profile_id).first()
            if row is None:
                raise ProfileNotFound(profile_id)
            # Detach a fully loaded copy before the session closes
            session.expunge(row)
            return row
        except SQLAlchemyError as e:
            logger.error("Failed to load profile %s", profile_id, exc_info=True)
            raise TransientStoreError('fetch_profile', e) from e
        finally:
            session.close()

    def fetch_profile_metrics(self, profile_id: str) -> ProfileMetrics:
        return ProfileMetrics.from_row(self._load_profile(profile_id))

    def fetch_profile(self, profile_id: str) -> ProfileSummary:
        return profile_to_summary(self._load_profile(profile_id))

    def count_in_scope(self, scope: str, industry: str, location_value: Optional[str],
                       dominating: Optional[ProfileMetrics] = None) -> int:
        column = _scope_column(scope)
        if location_value is None:
            return 0

        filters = [column == location_value, Profile.industry == industry]
        if dominating is not None:
            filters.append(or_(
                Profile.followers > dominating.followers,
                and_(
                    Profile.followers == dominating.followers,
                    Profile.engagement_rate > dominating.engagement_rate,
                ),
            ))

        session = get_session()
        try:
            return session.query(func.count(Profile.id)).filter(*filters).scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Failed to count %s scope %s for %s", scope, location_value, industry,
                         exc_info=True)
            raise TransientStoreError('count_in_scope', e) from e
        finally:
            session.close()

    def top_in_scope(self, scope: str, industry: str, location_value: Optional[str],
                     limit: int) -> List[Tuple[str, ProfileMetrics]]:
        column = _scope_column(scope)
        if location_value is None:
            return []

        session = get_session()
        try:
            rows = session.query(Profile).filter(
                column == location_value,
                Profile.industry == industry,
            ).order_by(
                Profile.followers.desc(),
                Profile.engagement_rate.desc(),
                Profile.username,
            ).limit(limit).all()
            return [(row.username, ProfileMetrics.from_row(row)) for row in rows]
        except SQLAlchemyError as e:
            logger.error("Failed to load leaderboard for %s scope %s", scope, location_value,
                         exc_info=True)
            raise TransientStoreError('top_in_scope', e) from e
        finally:
            session.close()


class SqlBaselineStore(BaselineStore):
    """Reads and writes the benchmarks table."""

    def load_baseline(self, industry: str, location_type: str,
                      location_value: Optional[str]) -> Optional[BenchmarkBaseline]:
        session = get_session()
        try:
            row = session.query(Benchmark).filter(
                Benchmark.industry == industry,
                Benchmark.location_type == location_type,
                Benchmark.location_value == location_value,
            ).first()
            return benchmark_to_baseline(row) if row else None
        except SQLAlchemyError as e:
            logger.error("Failed to load baseline %s/%s/%s", industry, location_type,
                         location_value, exc_info=True)
            raise TransientStoreError('load_baseline', e) from e
        finally:
            session.close()

    def upsert_baseline(self, baseline: BenchmarkBaseline) -> BenchmarkBaseline:
        """
        Read-then-merge-then-write in one transaction.

        Numeric fields and distributions are fully overwritten and updated_at
        bumped; last_calculated is set only on first insert. If another writer
        inserts the key between our read and commit, the merge is retried once
        against its row.
        """
        try:
            return self._merge(baseline)
        except IntegrityError:
            logger.info("Concurrent insert for baseline %s, merging into existing row",
                        baseline.key)
            try:
                return self._merge(baseline)
            except SQLAlchemyError as e:
                logger.error("Failed to upsert baseline %s", baseline.key, exc_info=True)
                raise TransientStoreError('upsert_baseline', e) from e
        except SQLAlchemyError as e:
            logger.error("Failed to upsert baseline %s", baseline.key, exc_info=True)
            raise TransientStoreError('upsert_baseline', e) from e

    def _merge(self, baseline: BenchmarkBaseline) -> BenchmarkBaseline:
        stamp = baseline.updated_at or utcnow()
        session = get_session()
        try:
            row = session.query(Benchmark).filter(
                Benchmark.industry == baseline.industry,
                Benchmark.location_type == baseline.location_type,
                Benchmark.location_value == baseline.location_value,
            ).with_for_update().first()

            if row is None:
                row = Benchmark(
                    industry=baseline.industry,
                    location_type=baseline.location_type,
                    location_value=baseline.location_value,
                    last_calculated=baseline.last_calculated or stamp,
                )
                session.add(row)

            row.avg_followers = baseline.avg_followers
            row.avg_engagement = baseline.avg_engagement
            row.avg_post_frequency = baseline.avg_post_frequency
            row.avg_reel_percentage = baseline.avg_reel_percentage
            row.follower_distribution = baseline.follower_distribution.to_json()
            row.engagement_distribution = baseline.engagement_distribution.to_json()
            row.sample_size = baseline.sample_size
            row.updated_at = stamp

            session.commit()
            return benchmark_to_baseline(row)
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()
