"""Environment-driven settings for sqlspine.

Every knob the engine exposes lives on ``SqlSpineSettings`` and can be set
through ``SQLSPINE_*`` environment variables or a ``.env`` file.

Features:
    - **SqlSpineSettings:** logging, binary decoding policy, commit behaviour,
      delete key policy, key/suffix generation parameters
    - **get_settings():** cached process-wide instance

Examples:
    >>> from sqlspine.core.settings import SqlSpineSettings
    >>> SqlSpineSettings(binary_decoding="raw").binary_decoding
    <BinaryDecoding.RAW: 'raw'>
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sqlspine.core.values import BinaryDecoding


class SqlSpineSettings(BaseSettings):
    """Settings shared by the record engine and table operations.

    Fields
    ──────
    log_level                  : structlog log level
    json_logs                  : JSON renderer (True), console (False), auto (None)
    binary_decoding            : how byte values in listed rows are decoded
    commit_each_statement      : call ``commit()`` after every mutation
    delete_by_all_primary_keys : constrain deletes by every key column
    duplicate_integer_ceiling  : exclusive upper bound for integer keys
    duplicate_string_length    : length of generated string keys
    table_suffix_length        : letters in synthesized table-copy names
    """

    model_config = SettingsConfigDict(
        env_prefix="SQLSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Row listing ──────────────────────────────────────────────
    binary_decoding: BinaryDecoding = BinaryDecoding.HEURISTIC

    # ── Mutations ────────────────────────────────────────────────
    commit_each_statement: bool = True
    delete_by_all_primary_keys: bool = False

    # ── Generated values ─────────────────────────────────────────
    duplicate_integer_ceiling: int = Field(default=1_000_000, gt=0)
    duplicate_string_length: int = Field(default=6, gt=0)
    table_suffix_length: int = Field(default=5, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> SqlSpineSettings:
    """Return the cached settings instance."""
    return SqlSpineSettings()


__all__ = [
    "SqlSpineSettings",
    "get_settings",
]
