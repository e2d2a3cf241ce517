"""
Central configuration for batchinvoker.

Typed settings read from environment variables (12-factor style) using
pydantic-settings ``BaseSettings``.

Usage:

    from batchinvoker.core.settings import get_settings

    settings = get_settings()
    host = Host(chain_id=settings.engine.chain_id)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..host.chain import DEFAULT_CHAIN_ID
from ..protocol.models import DEFAULT_GAS_ALLOWANCE
from ..tracking.records import DEFAULT_RECORD_PATH


class EngineSettings(BaseSettings):
    chain_id: int = Field(
        default=DEFAULT_CHAIN_ID,
        validation_alias="BATCHINVOKER_CHAIN_ID",
        description="Chain identifier bound into every domain separator.",
    )
    default_gas_allowance: int = Field(
        default=DEFAULT_GAS_ALLOWANCE,
        validation_alias="BATCHINVOKER_DEFAULT_GAS_ALLOWANCE",
        description="Gas allowance used for sub-operations that do not set one.",
    )

    @field_validator("chain_id", "default_gas_allowance")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be non-negative")
        return v

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)


class RecordSettings(BaseSettings):
    path: str = Field(
        default=DEFAULT_RECORD_PATH,
        validation_alias="BATCHINVOKER_RECORD_PATH",
        description="Where deployed instance addresses are remembered.",
    )
    redeploy: bool = Field(
        default=False,
        validation_alias=AliasChoices("BATCHINVOKER_REDEPLOY", "REDEPLOY"),
        description="Ignore the record and deploy fresh instances.",
    )

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)


class SignerSettings(BaseSettings):
    key_env: str = Field(
        default="PK_ALICE",
        validation_alias="BATCHINVOKER_KEY_ENV",
        description="Name of the environment variable holding the signing key.",
    )

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)


class RuntimeSettings(BaseSettings):
    log_level: str = Field(
        default="INFO",
        validation_alias="BATCHINVOKER_LOG_LEVEL",
        description="Package log level (DEBUG/INFO/WARNING/ERROR).",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        v = (v or "INFO").upper()
        if v == "WARN":
            return "WARNING"
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return "INFO"
        return v

    model_config = SettingsConfigDict(env_prefix="", populate_by_name=True)


class BatchInvokerSettings(BaseSettings):
    """
    Root configuration object.

    Aggregates:
      - Engine
      - Record cache
      - Signer
      - Runtime
    """

    engine: EngineSettings = Field(default_factory=EngineSettings)
    records: RecordSettings = Field(default_factory=RecordSettings)
    signer: SignerSettings = Field(default_factory=SignerSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)

    model_config = SettingsConfigDict(env_prefix="BATCHINVOKER_SETTINGS_")


@lru_cache(maxsize=1)
def get_settings() -> BatchInvokerSettings:
    """
    Cached accessor for BatchInvokerSettings.
    """
    return BatchInvokerSettings()
