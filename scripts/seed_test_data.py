#!/usr/bin/env python3
"""
Seed a local profiles corpus for trying the analyzer end to end.

Creates accounts across a few industries and cities:
  1. Austin fitness cohort (dense city scope, includes a follower tie)
  2. Dallas fitness accounts (same state, different city)
  3. Stale accounts (scraped > 30 days ago, excluded from baselines)
  4. A beauty account with no peers (degraded baseline)

Usage:
    python scripts/seed_test_data.py                      # seed
    python scripts/seed_test_data.py --clear              # wipe seeded rows first
    python scripts/seed_test_data.py --analyze fit_maya   # seed, then print an analysis

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import json
import argparse
from datetime import datetime, timezone, timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from app.database import get_session, engine, Base
from app.engine.types import Segment
from app.extensions import get_analyzer
from app.models.benchmark import Benchmark
from app.models.profile import Profile


# ── Fake accounts ────────────────────────────────────────────────────────────
# (username, industry, city, state, followers, engagement %, posts/week, reel %, age in days)

ACCOUNTS = [
    ('fit_maya',          'fitness', 'Austin', 'TX', 12543,  3.20, 4.2, 35, 2),
    ('liftwithleo',       'fitness', 'Austin', 'TX', 48200,  2.10, 6.5, 55, 5),
    ('coach.rosa',        'fitness', 'Austin', 'TX', 8900,   4.80, 3.0, 20, 1),
    ('austin_yogi',       'fitness', 'Austin', 'TX', 12543,  2.75, 5.5, 60, 9),
    ('runclubdan',        'fitness', 'Austin', 'TX', 3100,   6.10, 2.0, 10, 12),
    ('dallas_strong',     'fitness', 'Dallas', 'TX', 91000,  1.60, 7.0, 40, 3),
    ('pilates.priya',     'fitness', 'Dallas', 'TX', 22400,  3.90, 5.0, 70, 6),
    ('oldschool_gains',   'fitness', 'Austin', 'TX', 150000, 0.90, 1.0, 0,  45),
    ('retired_trainer',   'fitness', 'Dallas', 'TX', 7000,   2.00, 0.5, 5,  60),
    ('glow_by_nina',      'beauty',  'Boise',  'ID', 18750,  5.10, 6.0, 45, 1),
]

SEED_MARKER = 'seeded'


def seed_profiles(session):
    now = datetime.now(timezone.utc)
    existing = {u for (u,) in session.query(Profile.username).all()}
    added = 0
    for (username, industry, city, state, followers, engagement,
         post_freq, reels, age_days) in ACCOUNTS:
        if username in existing:
            continue
        session.add(Profile(
            username=username,
            full_name=username.replace('_', ' ').replace('.', ' ').title(),
            followers=followers,
            following=followers // 20,
            posts=120,
            engagement_rate=engagement,
            avg_likes=int(followers * engagement / 100),
            avg_comments=int(followers * engagement / 2000),
            industry=industry,
            location_city=city,
            location_state=state,
            location_country='US',
            post_frequency=post_freq,
            reel_percentage=reels,
            business_category=SEED_MARKER,
            last_scraped=now - timedelta(days=age_days),
        ))
        added += 1
    print(f'  seeded {added} profiles ({len(ACCOUNTS) - added} already present)')


# ── Clear / Main ─────────────────────────────────────────────────────────────

def clear_seeded_data(session):
    """Remove seeded profiles and every cached baseline."""
    deleted_profiles = session.query(Profile).filter(
        Profile.business_category == SEED_MARKER,
    ).delete(synchronize_session=False)
    deleted_benchmarks = session.query(Benchmark).delete(synchronize_session=False)
    session.commit()
    print(f'Cleared {deleted_profiles} profiles, {deleted_benchmarks} cached benchmarks.')


def main():
    parser = argparse.ArgumentParser(description='Seed a local profiles corpus')
    parser.add_argument('--clear', action='store_true', help='Clear seeded data before (or instead of) seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    parser.add_argument('--analyze', metavar='USERNAME', help='Print the analysis of a seeded account')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        # Ensure tables exist (for SQLite local dev)
        Base.metadata.create_all(engine)

        session = get_session()
        try:
            if args.clear or args.clear_only:
                clear_seeded_data(session)
                if args.clear_only:
                    return

            print('Seeding profiles...')
            seed_profiles(session)
            session.commit()
        except Exception as e:
            session.rollback()
            print(f'Error: {e}')
            raise
        finally:
            session.close()

        if args.analyze:
            row = next((a for a in ACCOUNTS if a[0] == args.analyze), None)
            if row is None:
                print(f'Unknown seeded account: {args.analyze}')
                return
            segment = Segment(industry=row[1], city=row[2], state=row[3], country='US')
            result = get_analyzer().analyze(args.analyze, segment)
            print(json.dumps(result.to_dict(), indent=2, default=str))
        else:
            print('\nDone! POST /api/analyze with {"username": "fit_maya", "industry": "fitness", ...}')


if __name__ == '__main__':
    main()
