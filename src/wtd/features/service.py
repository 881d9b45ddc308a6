"""Feature flags — a pure name -> bool lookup against configuration.

Flags come from ``Settings.feature_flags`` (override with the
``WTD_FEATURE_FLAGS`` JSON env var). Unknown names are disabled.
"""

from __future__ import annotations

import structlog

from wtd.config import get_settings

logger = structlog.get_logger()

BETTING_ENABLED = "BettingEnabled"
LEADERBOARD_ENABLED = "LeaderboardEnabled"
REAL_TIME_BETTING = "RealTimeBetting"
SOCIAL_SHARING = "SocialSharing"
BET_RECOMMENDATIONS = "BetRecommendations"

KNOWN_FEATURES: tuple[str, ...] = (
    BETTING_ENABLED,
    LEADERBOARD_ENABLED,
    REAL_TIME_BETTING,
    SOCIAL_SHARING,
    BET_RECOMMENDATIONS,
)


def is_enabled(name: str) -> bool:
    """Whether the named flag is on. Unknown flags are off."""
    enabled = bool(get_settings().feature_flags.get(name, False))
    logger.debug("feature_flag", feature=name, enabled=enabled)
    return enabled


def all_features() -> dict[str, bool]:
    """State of every known flag plus any extra configured ones."""
    configured = get_settings().feature_flags
    names = list(KNOWN_FEATURES) + [n for n in configured if n not in KNOWN_FEATURES]
    return {name: is_enabled(name) for name in names}
