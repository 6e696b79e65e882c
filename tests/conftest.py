"""Shared test fixtures."""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base
from app.engine.defaults import build_defaults, _default_table
from app.engine.memory import InMemoryBaselineStore, InMemoryCorpus
from app.engine.types import BenchmarkBaseline, Distribution, ProfileMetrics, Segment

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import app.models.profile
    import app.models.benchmark
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """SQLAlchemy session bound to in-memory SQLite. Rolls back after each test."""
    Session = sessionmaker(bind=db_engine)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def session_factory(db_engine):
    """
    Route get_session() inside app.services.corpus to fresh sessions on the
    test engine. The module binds get_session at import time, so it has to be
    patched where it is used.
    """
    TestSession = sessionmaker(bind=db_engine)
    with patch('app.services.corpus.get_session', side_effect=lambda: TestSession()):
        yield TestSession


@pytest.fixture
def industry_defaults():
    return build_defaults(_default_table())


@pytest.fixture
def corpus():
    return InMemoryCorpus()


@pytest.fixture
def store():
    return InMemoryBaselineStore()


@pytest.fixture
def make_metrics():
    """Factory fixture — ProfileMetrics with sensible defaults."""
    def _make(followers=10000, engagement_rate=3.0, post_frequency=5.0, reel_percentage=40):
        return ProfileMetrics(
            followers=followers,
            engagement_rate=engagement_rate,
            post_frequency=post_frequency,
            reel_percentage=reel_percentage,
        )
    return _make


@pytest.fixture
def make_baseline():
    """Factory fixture — city baseline for fitness/Austin."""
    def _make(**overrides):
        defaults = dict(
            industry='fitness',
            location_type='city',
            location_value='Austin',
            avg_followers=8500.0,
            avg_engagement=2.3,
            avg_post_frequency=5.2,
            avg_reel_percentage=40.0,
            follower_distribution=Distribution(),
            engagement_distribution=Distribution(),
            sample_size=0,
        )
        defaults.update(overrides)
        return BenchmarkBaseline(**defaults)
    return _make


@pytest.fixture
def austin_segment():
    return Segment(industry='fitness', city='Austin', state='TX', country='US')


@pytest.fixture
def seeded_corpus(corpus, make_metrics, now):
    """Austin/Dallas fitness accounts plus one stale and one off-industry account."""
    tx = dict(state='TX', country='US')
    rows = [
        ('fit_maya', 12543, 3.2, 4.2, 35, 'Austin', 2),
        ('liftwithleo', 48200, 2.1, 6.5, 55, 'Austin', 5),
        ('coach.rosa', 8900, 4.8, 3.0, 20, 'Austin', 1),
        ('austin_yogi', 12543, 2.75, 5.5, 60, 'Austin', 9),
        ('dallas_strong', 91000, 1.6, 7.0, 40, 'Dallas', 3),
        ('oldschool_gains', 150000, 0.9, 1.0, 0, 'Austin', 45),
    ]
    for username, followers, er, pf, reels, city, age in rows:
        corpus.add(
            username,
            make_metrics(followers, er, pf, reels),
            Segment(industry='fitness', city=city, **tx),
            last_scraped=now - timedelta(days=age),
        )
    corpus.add(
        'glow_by_nina',
        make_metrics(18750, 5.1, 6.0, 45),
        Segment(industry='beauty', city='Austin', **tx),
        last_scraped=now - timedelta(days=1),
    )
    return corpus


@pytest.fixture
def app():
    """Flask test app."""
    from app import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c
