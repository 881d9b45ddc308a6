"""Feature flag lookup endpoints."""

from fastapi import APIRouter

from wtd.features.service import all_features, is_enabled

router = APIRouter(prefix="/api/features", tags=["Features"])


@router.get("")
async def list_features() -> dict[str, bool]:
    """Status of all feature flags."""
    return all_features()


@router.get("/{feature_name}")
async def get_feature(feature_name: str) -> dict[str, object]:
    """Status of a single feature flag."""
    return {"feature": feature_name, "enabled": is_enabled(feature_name)}
