"""
Configuration Settings.

Two layers:

- ``AgentConfig`` is the immutable configuration object an ``AgentInstance``
  is built with and that every provider sees through ``ExecutionContext.config``.
  Each section is optional; a provider that needs a section checks for it in
  its ``initialize`` hook.
- ``AgentSettings`` binds the same shape (plus logging knobs) from environment
  variables and a ``.env`` file using Pydantic's BaseSettings, e.g.
  ``BIOAGENTS_LLM__PROVIDER=openai`` or ``BIOAGENTS_DATAVERSE__API_URL=...``.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Section Models
# =====================================================================


class LLMConfig(BaseModel):
    """Language model used by the metadata enricher."""

    provider: Literal["openai", "anthropic", "azure", "local"] = Field(
        default="openai", description="LLM provider identifier"
    )
    model: str = Field(default="gpt-4o", description="Model name passed to the provider")
    api_key: Optional[str] = Field(default=None, description="API key for the provider")
    endpoint: Optional[str] = Field(default=None, description="Custom API base URL (optional)")
    api_version: Optional[str] = Field(default=None, description="API version (azure only)")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=2000, ge=1, description="Maximum tokens per response")

    model_config = ConfigDict(frozen=True)


class DataverseConfig(BaseModel):
    """Dataverse repository access."""

    api_url: str = Field(..., description="Base URL of the Dataverse installation")
    api_key: Optional[str] = Field(default=None, description="Dataverse API token (X-Dataverse-key)")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    model_config = ConfigDict(frozen=True)


class DKGConfig(BaseModel):
    """Knowledge graph node used when publishing issued identities."""

    node_url: str = Field(..., description="Knowledge graph node URL")

    model_config = ConfigDict(frozen=True)


class GDPRConfig(BaseModel):
    strict_mode: bool = Field(default=False, description="Fail closed on compliance doubts")
    audit_level: Literal["basic", "detailed", "comprehensive"] = Field(default="basic")

    model_config = ConfigDict(frozen=True)


class IssuerConfig(BaseModel):
    """Identity issuer settings for the DID issuer provider."""

    did: Optional[str] = Field(default=None, description="Issuer DID; generated when unset")
    private_key: Optional[str] = Field(default=None, description="Issuer signing key reference")
    name: str = Field(default="HeliXID Metadata Agent", description="Issuer display name")
    service_base_url: str = Field(
        default="https://api.helixid.xyz/datasets",
        description="Base URL for dataset service endpoints in DID documents",
    )

    model_config = ConfigDict(frozen=True)


class AgentConfig(BaseModel):
    """Immutable configuration shared by every provider on one agent instance."""

    llm: Optional[LLMConfig] = None
    dataverse: Optional[DataverseConfig] = None
    dkg: Optional[DKGConfig] = None
    gdpr: GDPRConfig = Field(default_factory=GDPRConfig)
    issuer: IssuerConfig = Field(default_factory=IssuerConfig)

    model_config = ConfigDict(frozen=True)


# =====================================================================
# Main Settings Class
# =====================================================================


class AgentSettings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Nested sections use ``__`` as the delimiter.
    """

    model_config = SettingsConfigDict(
        env_prefix="BIOAGENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    log_format: Literal["simple", "detailed", "json"] = Field(default="detailed", description="Log line format")
    log_file_dir: str = Field(default="logs", description="Directory for the log file")
    enable_file_logging: bool = Field(default=False, description="Also write logs to a file")

    # =====================================================================
    # Agent Sections
    # =====================================================================
    llm: Optional[LLMConfig] = None
    dataverse: Optional[DataverseConfig] = None
    dkg: Optional[DKGConfig] = None
    gdpr: GDPRConfig = Field(default_factory=GDPRConfig)
    issuer: IssuerConfig = Field(default_factory=IssuerConfig)

    def to_agent_config(self) -> AgentConfig:
        """Build the immutable ``AgentConfig`` from the loaded settings."""
        return AgentConfig(
            llm=self.llm,
            dataverse=self.dataverse,
            dkg=self.dkg,
            gdpr=self.gdpr,
            issuer=self.issuer,
        )
