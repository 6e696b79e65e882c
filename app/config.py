"""
Centralized configuration — env vars and fixed engine constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Benchmark engine ─────────────────────────────────────────────────────────
# Fixed constants, never overridden per call.
BENCHMARK_FRESHNESS_HOURS = 24
CORPUS_MAX_AGE_DAYS = 30

# Path to the per-industry fallback table (YAML). None = bundled file.
INDUSTRY_DEFAULTS_PATH = os.getenv('INDUSTRY_DEFAULTS_PATH')

# ── Ranking scopes ───────────────────────────────────────────────────────────
RANK_SCOPES = ['city', 'state', 'national']

# Reported scope size when no stored peer matches (avoids "rank 1 of 1")
RANK_TOTAL_FALLBACKS = {
    'city': 1000,
    'state': 5000,
    'national': 50000,
}

LEADERBOARD_DEFAULT_LIMIT = 10
LEADERBOARD_MAX_LIMIT = 100
