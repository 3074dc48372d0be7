"""Blur configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings

from .pixel_source import AlphaMode


class BlurSettings(BaseSettings):
    """Blur settings, overridable via ``BLURSTAG_*`` environment variables."""

    # Kernel
    SIGMA: float = Field(default=2.0, ge=1.0 / 3.0)  # Gaussian std deviation, radius >= 1

    # Scheduling
    NUM_WORKERS: int | None = Field(default=None, gt=0)  # None = cpu count
    BLOCK_ROWS: int = Field(default=8, gt=0)  # Image rows per scheduled task
    JOIN_TIMEOUT: float | None = Field(default=None, gt=0)  # Seconds, None = forever
    LOCK_STRIPES: int = Field(default=64, gt=0)  # Locks guarding result grid cells

    # Pixel source
    ALPHA_MODE: AlphaMode = AlphaMode.MEAN_RGB  # BLURSTAG_ALPHA_MODE=mean_rgb or source

    model_config = {"env_prefix": "BLURSTAG_"}


settings = BlurSettings()
