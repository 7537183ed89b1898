from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class PrerequisitePolicy(str, Enum):
    """How the resolver treats a capability whose prerequisite was not requested."""
    STRICT = "strict"  # report a diagnostic
    AUTO = "auto"      # add the prerequisite


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HARDTYPE_", env_file=".env", extra="ignore")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for machine-readable output in CI

    # Generation
    PREREQUISITE_POLICY: PrerequisitePolicy = PrerequisitePolicy.STRICT
    EMIT_HEADER: bool = True  # "generated by" comment at the top of artifacts


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
