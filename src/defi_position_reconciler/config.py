"""
Runtime settings for the reconciler.

Values come from ``RECONCILER_*`` environment variables or a ``.env`` file;
CLI options override them.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Reconciler settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RECONCILER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debank_data_dir: Path = Field(
        default=Path("data"),
        description="Directory of DeBank payloads (<address>/<debank slug>.json)",
    )
    zerion_data_dir: Path = Field(
        default=Path("data_zerion"),
        description="Directory of Zerion payloads (<address>/<zerion slug>.json)",
    )
    output_file: Path = Field(
        default=Path("comparison_data.json"),
        description="Comparison dataset written by a reconciliation pass",
    )
    addresses_file: Path | None = Field(
        default=None,
        description="Optional YAML list of addresses to restrict the pass to",
    )
    chains_file: Path | None = Field(
        default=None,
        description="Chain table overriding the packaged chains.yaml",
    )
    aliases_file: Path | None = Field(
        default=None,
        description="Alias table overriding the packaged protocol_aliases.yaml",
    )

    def provider_roots(self) -> dict[str, Path]:
        """Provider name -> raw data directory."""
        return {"debank": self.debank_data_dir, "zerion": self.zerion_data_dir}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
