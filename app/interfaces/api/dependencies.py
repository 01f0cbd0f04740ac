"""FastAPI dependency utilities."""

from functools import lru_cache
from hmac import compare_digest

from fastapi import Depends, Header, HTTPException, status

from app.application.use_cases.notifications import NotificationPipeline, build_pipeline
from app.config import Settings, get_settings


@lru_cache
def get_pipeline() -> NotificationPipeline:
    """Return the process wide notification pipeline."""

    return build_pipeline(get_settings())


def verify_cron_secret(
    x_cron_secret: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject trigger requests that do not carry the configured cron secret."""

    if not settings.cron_secret:
        return
    if x_cron_secret is None or not compare_digest(x_cron_secret, settings.cron_secret):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid cron secret",
        )
