"""Unit tests for the configuration models and environment-bound settings."""

import pytest
from pydantic import ValidationError

from bioagents.core.config import (
    AgentConfig,
    AgentSettings,
    DataverseConfig,
    DKGConfig,
    IssuerConfig,
    LLMConfig,
)


class TestAgentConfig:
    def test_defaults(self):
        config = AgentConfig()
        assert config.llm is None
        assert config.dataverse is None
        assert config.dkg is None
        assert config.gdpr.strict_mode is False
        assert config.gdpr.audit_level == "basic"
        assert config.issuer.name == "HeliXID Metadata Agent"
        assert config.issuer.did is None

    def test_is_frozen(self):
        config = AgentConfig()
        with pytest.raises(ValidationError):
            config.dkg = DKGConfig(node_url="http://mock-dkg.test")

    def test_llm_defaults_and_bounds(self):
        llm = LLMConfig()
        assert (llm.provider, llm.model, llm.temperature, llm.max_tokens) == ("openai", "gpt-4o", 0.3, 2000)
        with pytest.raises(ValidationError):
            LLMConfig(temperature=3.0)
        with pytest.raises(ValidationError):
            LLMConfig(provider="cohere")

    def test_dataverse_requires_url(self):
        with pytest.raises(ValidationError):
            DataverseConfig()
        assert DataverseConfig(api_url="http://mock-dataverse.test").timeout == 30.0


class TestAgentSettings:
    def test_nested_sections_from_environment(self, monkeypatch):
        monkeypatch.setenv("BIOAGENTS_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("BIOAGENTS_LLM__PROVIDER", "anthropic")
        monkeypatch.setenv("BIOAGENTS_LLM__MODEL", "claude-3-5-sonnet-latest")
        monkeypatch.setenv("BIOAGENTS_DATAVERSE__API_URL", "http://mock-dataverse.test")
        monkeypatch.setenv("BIOAGENTS_DATAVERSE__API_KEY", "secret")
        monkeypatch.setenv("BIOAGENTS_ISSUER__DID", "did:web:helixid.xyz")

        settings = AgentSettings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.llm == LLMConfig(provider="anthropic", model="claude-3-5-sonnet-latest")
        assert settings.dataverse.api_key == "secret"
        assert settings.issuer == IssuerConfig(did="did:web:helixid.xyz")

    def test_to_agent_config(self, monkeypatch):
        monkeypatch.setenv("BIOAGENTS_DKG__NODE_URL", "http://mock-dkg.test")
        config = AgentSettings(_env_file=None).to_agent_config()

        assert isinstance(config, AgentConfig)
        assert config.dkg.node_url == "http://mock-dkg.test"
        assert config.llm is None

    def test_defaults_without_environment(self):
        settings = AgentSettings(_env_file=None)
        assert settings.log_format == "detailed"
        assert settings.enable_file_logging is False
