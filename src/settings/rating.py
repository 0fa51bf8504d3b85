"""Rating normalization settings.

Environment overrides for the engine's RatingConfig (RATING_ prefix,
dict fields as JSON). The fields and their bounds are taken from
RatingConfig itself, so both always agree. The engine never reads
settings; callers build a config with to_config().
"""

from copy import copy

from pydantic import create_model
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.catalog.rating_normalizer import RatingConfig
from src.settings.base import get_env_file


class _RatingSettingsBase(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RATING_",
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def to_config(self) -> RatingConfig:
        """Build the immutable engine configuration."""
        return RatingConfig(**self.model_dump())


RatingSettings = create_model(
    "RatingSettings",
    __base__=_RatingSettingsBase,
    __doc__="Rating normalization configuration, one RATING_* variable per RatingConfig field.",
    __module__=__name__,
    **{name: (field.annotation, copy(field)) for name, field in RatingConfig.model_fields.items()},
)
