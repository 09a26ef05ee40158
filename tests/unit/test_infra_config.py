"""
Tests for environment configuration and bootstrap wiring.
"""

import pytest

from infra import InfraBootstrap, InfraConfig
from inference import ConfigurationError, GeminiModelBackend, StubModelBackend


@pytest.fixture
def clean_env(monkeypatch):
    for key in ("LLM_BACKEND", "GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "GEMINI_BASE_URL",
                "GEMINI_TIMEOUT_S", "AGENT_PORT", "ENVIRONMENT"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestInfraConfig:

    def test_defaults(self, clean_env):
        config = InfraConfig.from_env()
        assert config.llm_backend == "gemini"
        assert config.gemini_model == "gemini-2.5-flash"
        assert config.gemini_timeout_s is None
        assert config.agent_port == 8000

    def test_gemini_without_key_fails_at_startup(self, clean_env):
        with pytest.raises(ConfigurationError):
            InfraConfig.from_env().create_gateway()

    def test_api_key_fallback(self, clean_env):
        clean_env.setenv("API_KEY", "legacy-key")
        backend = InfraConfig.from_env().create_llm_backend()
        assert isinstance(backend, GeminiModelBackend)
        assert backend.api_key == "legacy-key"

    def test_gemini_settings(self, clean_env):
        clean_env.setenv("GEMINI_API_KEY", "k")
        clean_env.setenv("GEMINI_MODEL", "gemini-2.5-pro")
        clean_env.setenv("GEMINI_TIMEOUT_S", "12.5")

        gateway = InfraConfig.from_env().create_gateway()
        assert gateway.backend.model_name == "gemini-2.5-pro"
        assert gateway.timeout_s == 12.5

    def test_stub_backend(self, clean_env):
        clean_env.setenv("LLM_BACKEND", "STUB")
        assert isinstance(InfraConfig.from_env().create_llm_backend(), StubModelBackend)

    def test_unknown_backend(self, clean_env):
        clean_env.setenv("LLM_BACKEND", "ollama")
        with pytest.raises(ConfigurationError):
            InfraConfig.from_env().create_llm_backend()

    def test_bad_timeout(self, clean_env):
        clean_env.setenv("GEMINI_TIMEOUT_S", "soon")
        with pytest.raises(ConfigurationError):
            InfraConfig.from_env()


class TestBootstrap:

    def test_stub_bootstrap_wires_assistant(self, clean_env):
        clean_env.setenv("LLM_BACKEND", "stub")
        InfraBootstrap.reset()
        try:
            infra = InfraBootstrap.get_instance()
            assert infra is InfraBootstrap.get_instance()
            assert infra.get_assistant().fetch_market_news()
        finally:
            InfraBootstrap.reset()
