"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (CATALOGSEARCH_ prefix) and .env
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class EngineSettings(BaseModel):
    """Search engine connection configuration."""

    backend: Literal["elasticsearch", "opensearch"] = Field(
        default="elasticsearch", description="Transport used to reach the engine"
    )
    hosts: list[str] = Field(default_factory=lambda: ["http://localhost:9200"], description="Engine node URLs")
    index: str = Field(default="products", description="Target index name")
    username: str | None = Field(default=None, description="Basic-auth username")
    password: str | None = Field(default=None, description="Basic-auth password")
    api_key: str | None = Field(default=None, description="API key authentication")
    ca_cert: str | None = Field(default=None, description="CA certificate path or PEM content")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, v: Any) -> list[str]:
        """Parse hosts from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(h) for h in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        return list(v)

    def transport_kwargs(self) -> dict[str, Any]:
        """Constructor arguments for the configured transport class."""
        return {
            "hosts": self.hosts,
            "username": self.username,
            "password": self.password,
            "api_key": self.api_key,
            "ca_cert": self.ca_cert,
            "verify_certs": self.verify_certs,
            "timeout": self.timeout,
        }


class LoaderSettings(BaseModel):
    """Bulk loading configuration."""

    batch_size: int = Field(default=100, gt=0, description="Documents per bulk request")
    record_count: int = Field(default=1000, ge=0, description="Products generated by 'seed'")
    seed: int | None = Field(default=None, description="Random seed for reproducible data")
    recreate_index: bool = Field(default=True, description="Drop and recreate the index before loading")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="console", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the CATALOGSEARCH_ prefix.
    Nested settings use double underscores: CATALOGSEARCH_ENGINE__INDEX=products

    Example:
        CATALOGSEARCH_ENGINE__HOSTS='["https://es1:9200"]'
        CATALOGSEARCH_ENGINE__API_KEY=...
        CATALOGSEARCH_LOADER__BATCH_SIZE=500
    """

    model_config = {
        "env_prefix": "CATALOGSEARCH_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "frozen": True,
    }

    engine: EngineSettings = Field(default_factory=EngineSettings)
    loader: LoaderSettings = Field(default_factory=LoaderSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file take precedence over environment variables;
        anything the file leaves out falls back to the environment, then to
        the defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
