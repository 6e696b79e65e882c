"""
Per-industry fallback baselines (YAML with hardcoded fallback).

The table is loaded once into a read-only mapping and handed to the resolver
at construction; nothing mutates it afterwards.
"""
import logging
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

from app.config import INDUSTRY_DEFAULTS_PATH

logger = logging.getLogger('engine.defaults')

DEFAULT_KEY = 'default'


@dataclass(frozen=True)
class IndustryDefaults:
    avg_followers: float
    avg_engagement: float
    avg_post_frequency: float


def _default_table():
    """Hardcoded fallback if YAML is missing."""
    return {
        'fitness': {'avg_followers': 15000, 'avg_engagement': 3.5, 'avg_post_frequency': 5.2},
        'beauty': {'avg_followers': 25000, 'avg_engagement': 4.2, 'avg_post_frequency': 7.5},
        'health': {'avg_followers': 18000, 'avg_engagement': 3.8, 'avg_post_frequency': 4.8},
        'fashion': {'avg_followers': 35000, 'avg_engagement': 3.2, 'avg_post_frequency': 9.2},
        'food': {'avg_followers': 20000, 'avg_engagement': 4.5, 'avg_post_frequency': 8.0},
        'business': {'avg_followers': 12000, 'avg_engagement': 2.5, 'avg_post_frequency': 4.0},
        DEFAULT_KEY: {'avg_followers': 15000, 'avg_engagement': 3.0, 'avg_post_frequency': 5.0},
    }


def build_defaults(table) -> Mapping[str, IndustryDefaults]:
    """Validate a raw {industry: {...}} table into a read-only mapping."""
    if DEFAULT_KEY not in table:
        raise ValueError(f"industry defaults table needs a '{DEFAULT_KEY}' row")
    parsed = {
        industry: IndustryDefaults(
            avg_followers=float(row['avg_followers']),
            avg_engagement=float(row['avg_engagement']),
            avg_post_frequency=float(row['avg_post_frequency']),
        )
        for industry, row in table.items()
    }
    return MappingProxyType(parsed)


def load_industry_defaults(path: Optional[str] = None) -> Mapping[str, IndustryDefaults]:
    """Load the defaults table from YAML, falling back to the hardcoded one."""
    config_path = path or INDUSTRY_DEFAULTS_PATH or os.path.join(
        os.path.dirname(__file__), 'industry_defaults.yaml',
    )
    try:
        with open(config_path, 'r') as f:
            raw = yaml.safe_load(f)
        defaults = build_defaults(raw['industries'])
        logger.info("Industry defaults loaded from YAML (version=%s)", raw.get('version', '?'))
        return defaults
    except (OSError, KeyError, TypeError, ValueError, yaml.YAMLError) as e:
        logger.warning("Industry defaults YAML unusable (%s), using built-in table", e)
        return build_defaults(_default_table())


def defaults_for(defaults: Mapping[str, IndustryDefaults], industry: str) -> IndustryDefaults:
    return defaults.get(industry) or defaults[DEFAULT_KEY]
