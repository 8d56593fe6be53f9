"""Tests for config loading -- file sections, env overrides and saving."""

import json
import os
import pytest
from unittest.mock import patch


class TestDefaults:
    def test_llm_config_defaults(self):
        from mem42.common.config import LLMConfig
        cfg = LLMConfig()
        assert cfg.provider == "google"
        assert cfg.model == "gemini-2.5-flash"
        assert cfg.api_key == ""

    def test_llm_model_follows_provider(self):
        from mem42.common.config import LLMConfig
        cfg = LLMConfig(provider="openai", openai_api_key="sk-1")
        assert cfg.model == "gpt-4o-mini"
        assert cfg.api_key == "sk-1"

    def test_unknown_provider_has_no_model(self):
        from mem42.common.config import LLMConfig
        assert LLMConfig(provider="mystery").model == ""

    def test_synthesis_defaults(self):
        from mem42.common.config import SynthesisConfig
        cfg = SynthesisConfig()
        assert cfg.topk == 3
        assert cfg.plan_temperature == 0.5
        assert cfg.synthesis_temperature == 0.7
        assert cfg.always_optimize_query is True

    def test_embedding_defaults(self):
        from mem42.common.config import EmbeddingConfig
        cfg = EmbeddingConfig()
        assert cfg.mode == "google"
        assert cfg.dimension == 768

    def test_store_backend(self):
        from mem42.common.config import Mem42Config
        cfg = Mem42Config()
        assert cfg.store_backend == "memory"
        cfg.qdrant.url = "http://localhost:6333"
        assert cfg.store_backend == "qdrant"


class TestLoadConfig:
    @pytest.fixture(autouse=True)
    def clean_env(self):
        keys = [
            "GOOGLE_API_KEY", "GEMINI_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY",
            "MEM42_LLM_PROVIDER", "MEM42_LLM_MODEL", "EMBEDDING_MODE", "EMBEDDING_MODEL",
            "EMBEDDING_DIMENSION", "QDRANT_URL", "QDRANT_API_KEY", "QDRANT_COLLECTION",
            "MEM42_TOPK",
        ]
        saved = {k: os.environ.pop(k) for k in keys if k in os.environ}
        yield
        os.environ.update(saved)

    def test_missing_file_gives_defaults(self, tmp_path):
        from mem42.common.config import load_config

        with patch("mem42.common.config.CONFIG_PATH", tmp_path / "missing.json"):
            cfg = load_config()

        assert cfg.llm.provider == "google"
        assert cfg.synthesis.topk == 3

    def test_load_config_sections(self, tmp_path):
        from mem42.common.config import load_config
        config_data = {
            "llm": {"provider": "anthropic", "anthropic_api_key": "ak-file"},
            "qdrant": {"url": "http://qdrant:6333", "collection": "engrams"},
            "synthesis": {"topk": 5, "always_optimize_query": False},
            "ingest": {"max_pdf_pages": 10},
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with patch("mem42.common.config.CONFIG_PATH", config_file):
            cfg = load_config()

        assert cfg.llm.provider == "anthropic"
        assert cfg.llm.anthropic_api_key == "ak-file"
        assert cfg.qdrant.collection == "engrams"
        assert cfg.synthesis.topk == 5
        assert cfg.synthesis.always_optimize_query is False
        assert cfg.synthesis.plan_temperature == 0.5
        assert cfg.ingest.max_pdf_pages == 10
        assert cfg.store_backend == "qdrant"

    def test_invalid_json_logs_warning(self, tmp_path, caplog):
        import logging
        from mem42.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with patch("mem42.common.config.CONFIG_PATH", config_file), \
             caplog.at_level(logging.WARNING, logger="mem42.common.config"):
            cfg = load_config()

        assert "Failed to load config file" in caplog.text
        assert cfg.llm.provider == "google"

    def test_env_var_overrides_llm_config(self, tmp_path):
        from mem42.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")

        env = {"OPENAI_API_KEY": "sk-env", "MEM42_LLM_PROVIDER": "openai", "MEM42_LLM_MODEL": "gpt-4o"}
        with patch("mem42.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.llm.openai_api_key == "sk-env"
        assert cfg.llm.provider == "openai"
        assert cfg.llm.model == "gpt-4o"

    def test_gemini_api_key_env_var(self, tmp_path):
        """GEMINI_API_KEY should also set google_api_key."""
        from mem42.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")

        with patch("mem42.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, {"GEMINI_API_KEY": "gem-key"}, clear=False):
            cfg = load_config()

        assert cfg.llm.google_api_key == "gem-key"

    def test_store_and_embedding_env_vars(self, tmp_path):
        from mem42.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")

        env = {
            "QDRANT_URL": "http://env:6333",
            "QDRANT_COLLECTION": "env-coll",
            "EMBEDDING_MODE": "femb",
            "EMBEDDING_DIMENSION": "384",
            "MEM42_TOPK": "7",
        }
        with patch("mem42.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.qdrant.url == "http://env:6333"
        assert cfg.qdrant.collection == "env-coll"
        assert cfg.embedding.mode == "femb"
        assert cfg.embedding.dimension == 384
        assert cfg.synthesis.topk == 7


class TestSaveConfig:
    @pytest.fixture(autouse=True)
    def clean_env(self):
        keys = ["GOOGLE_API_KEY", "GEMINI_API_KEY", "ANTHROPIC_API_KEY", "OPENAI_API_KEY", "QDRANT_API_KEY"]
        saved = {k: os.environ.pop(k) for k in keys if k in os.environ}
        yield
        os.environ.update(saved)

    def test_save_config_omits_env_keys(self, tmp_path):
        from mem42.common.config import load_config, save_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{}")

        env = {"GEMINI_API_KEY": "gem-from-env", "QDRANT_API_KEY": "qd-from-env"}
        with patch("mem42.common.config.CONFIG_PATH", config_file), \
             patch("mem42.common.config.CONFIG_DIR", tmp_path), \
             patch.dict(os.environ, env, clear=False):
            cfg = load_config()
            save_config(cfg)

        saved = json.loads(config_file.read_text())
        assert saved["llm"]["google_api_key"] == ""
        assert saved["qdrant"]["api_key"] == ""

    def test_save_config_round_trips_file_values(self, tmp_path):
        from mem42.common.config import load_config, save_config
        config_data = {
            "llm": {"provider": "openai", "openai_api_key": "sk-file", "openai_model": "gpt-4o"},
            "synthesis": {"topk": 4},
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with patch("mem42.common.config.CONFIG_PATH", config_file), \
             patch("mem42.common.config.CONFIG_DIR", tmp_path):
            cfg = load_config()
            save_config(cfg)

        saved = json.loads(config_file.read_text())
        assert saved["llm"]["provider"] == "openai"
        assert saved["llm"]["openai_api_key"] == "sk-file"
        assert saved["synthesis"]["topk"] == 4
        assert set(saved) == {"llm", "embedding", "qdrant", "synthesis", "ingest"}

    def test_save_config_permissions(self, tmp_path):
        from mem42.common.config import Mem42Config, save_config
        config_file = tmp_path / "config.json"

        with patch("mem42.common.config.CONFIG_PATH", config_file), \
             patch("mem42.common.config.CONFIG_DIR", tmp_path):
            save_config(Mem42Config())

        assert config_file.stat().st_mode & 0o777 == 0o600

    def test_ensure_directories(self, tmp_path):
        from mem42.common.config import ensure_directories
        config_dir = tmp_path / ".mem42"

        with patch("mem42.common.config.CONFIG_DIR", config_dir), \
             patch("mem42.common.config.LOGS_DIR", config_dir / "logs"):
            ensure_directories()

        assert (config_dir / "logs").is_dir()
