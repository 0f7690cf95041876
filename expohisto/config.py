import functools
import logging
import os
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EXPOHISTO_", env_file=".env", extra="ignore")

    # ================
    # Table generation
    # ================

    # Worker processes for the offline generator; None uses every CPU.
    workers: Optional[int] = None
    # Each worker's share of the table is cut into this many slices so that
    # progress can be reported while the slices complete.
    slices_per_worker: int = 8
    # Seconds between two progress reports of the generator.
    progress_interval: float = 60.0
    # Digits used for the initial decimal estimate of each entry; the exact
    # integer refinement corrects whatever this gets wrong.
    decimal_precision: int = 40

    # ==============
    # Runtime tables
    # ==============

    # Directory holding tables written by the generator as scale_<s>.py.
    # Scales without a file there are derived on first use.
    table_dir: Optional[str] = None

    log_level: str = "INFO"

    @field_validator("table_dir", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: Optional[str]) -> Optional[str]:
        if type(v) is str and v.strip() == "":
            return None
        return v

    @field_validator("workers", "slices_per_worker")
    @classmethod
    def positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("decimal_precision")
    @classmethod
    def enough_digits(cls, v: int) -> int:
        # 2^52 has 16 digits; fewer would leave the refinement far to walk.
        if v < 20:
            raise ValueError("must be at least 20 digits")
        return v

    def worker_count(self) -> int:
        if self.workers is not None:
            return self.workers
        return os.cpu_count() or 1


@functools.lru_cache(maxsize=None)
def GetSettings() -> Settings:
    settings = Settings()
    logger.debug("Loaded settings %s", settings)
    return settings
