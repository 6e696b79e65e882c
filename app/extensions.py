"""
Shared engine instances — corpus, baseline store, defaults table, analyzer.

Lazily built on first access so importing this module is always safe (even
when the database is not reachable during tests).
"""
import logging

logger = logging.getLogger('app.extensions')

_analyzer = None
_industry_defaults = None


def get_industry_defaults():
    global _industry_defaults
    if _industry_defaults is None:
        from app.engine.defaults import load_industry_defaults
        _industry_defaults = load_industry_defaults()
    return _industry_defaults


def get_analyzer():
    """Analyzer wired to the SQL corpus and benchmarks cache."""
    global _analyzer
    if _analyzer is None:
        from app.engine.analyzer import Analyzer
        from app.services.corpus import SqlBaselineStore, SqlPeerCorpus
        _analyzer = Analyzer(SqlPeerCorpus(), SqlBaselineStore(), get_industry_defaults())
        logger.info("Benchmark analyzer initialized")
    return _analyzer


def reset():
    """Drop cached instances (tests, config reloads)."""
    global _analyzer, _industry_defaults
    _analyzer = None
    _industry_defaults = None
