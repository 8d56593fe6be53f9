"""
Configuration Management for Mem42

Loads configuration from ~/.mem42/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("mem42.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".mem42"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOGS_DIR = CONFIG_DIR / "logs"


@dataclass
class LLMConfig:
    """Generation provider configuration"""
    provider: str = "google"
    google_api_key: str = ""
    google_model: str = "gemini-2.5-flash"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    @property
    def model(self) -> str:
        """Model name for the selected provider"""
        return {
            "google": self.google_model,
            "anthropic": self.anthropic_model,
            "openai": self.openai_model,
        }.get(self.provider, "")

    @property
    def api_key(self) -> str:
        """API key for the selected provider"""
        return {
            "google": self.google_api_key,
            "anthropic": self.anthropic_api_key,
            "openai": self.openai_api_key,
        }.get(self.provider, "")


@dataclass
class EmbeddingConfig:
    """Embedding model configuration"""
    mode: str = "google"  # hosted Gemini embeddings; "femb" for on-device fastembed
    model: str = "models/text-embedding-004"
    dimension: int = 768


@dataclass
class QdrantConfig:
    """Qdrant vector database configuration"""
    url: str = ""
    api_key: str = ""
    collection: str = "mem42"


@dataclass
class SynthesisConfig:
    """Collaborative synthesis settings"""
    topk: int = 3
    plan_temperature: float = 0.5
    synthesis_temperature: float = 0.7
    always_optimize_query: bool = True


@dataclass
class IngestConfig:
    """Document ingestion settings"""
    engram_temperature: float = 0.2
    max_pdf_pages: int = 200


@dataclass
class Mem42Config:
    """Main Mem42 configuration"""
    llm: LLMConfig = field(default_factory=LLMConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    qdrant: QdrantConfig = field(default_factory=QdrantConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    _env_sourced_keys: set = field(default_factory=set, repr=False)

    @property
    def store_backend(self) -> str:
        """"qdrant" when a Qdrant URL is configured, else in-process"""
        return "qdrant" if self.qdrant.url else "memory"


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    defaults = LLMConfig()
    return LLMConfig(
        provider=llm_data.get("provider", defaults.provider),
        google_api_key=llm_data.get("google_api_key", ""),
        google_model=llm_data.get("google_model", defaults.google_model),
        anthropic_api_key=llm_data.get("anthropic_api_key", ""),
        anthropic_model=llm_data.get("anthropic_model", defaults.anthropic_model),
        openai_api_key=llm_data.get("openai_api_key", ""),
        openai_model=llm_data.get("openai_model", defaults.openai_model),
    )


def _parse_embedding_config(data: dict) -> EmbeddingConfig:
    """Parse embedding section from config dict"""
    embedding_data = data.get("embedding", {})
    defaults = EmbeddingConfig()
    return EmbeddingConfig(
        mode=embedding_data.get("mode", defaults.mode),
        model=embedding_data.get("model", defaults.model),
        dimension=embedding_data.get("dimension", defaults.dimension),
    )


def _parse_qdrant_config(data: dict) -> QdrantConfig:
    """Parse qdrant section from config dict"""
    qdrant_data = data.get("qdrant", {})
    return QdrantConfig(
        url=qdrant_data.get("url", ""),
        api_key=qdrant_data.get("api_key", ""),
        collection=qdrant_data.get("collection", "mem42"),
    )


def _parse_synthesis_config(data: dict) -> SynthesisConfig:
    """Parse synthesis section from config dict"""
    synthesis_data = data.get("synthesis", {})
    defaults = SynthesisConfig()
    return SynthesisConfig(
        topk=synthesis_data.get("topk", defaults.topk),
        plan_temperature=synthesis_data.get("plan_temperature", defaults.plan_temperature),
        synthesis_temperature=synthesis_data.get(
            "synthesis_temperature", defaults.synthesis_temperature
        ),
        always_optimize_query=synthesis_data.get(
            "always_optimize_query", defaults.always_optimize_query
        ),
    )


def _parse_ingest_config(data: dict) -> IngestConfig:
    """Parse ingest section from config dict"""
    ingest_data = data.get("ingest", {})
    defaults = IngestConfig()
    return IngestConfig(
        engram_temperature=ingest_data.get("engram_temperature", defaults.engram_temperature),
        max_pdf_pages=ingest_data.get("max_pdf_pages", defaults.max_pdf_pages),
    )


def load_config() -> Mem42Config:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.mem42/config.json)
    3. Default values
    """
    config = Mem42Config()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.llm = _parse_llm_config(data)
            config.embedding = _parse_embedding_config(data)
            config.qdrant = _parse_qdrant_config(data)
            config.synthesis = _parse_synthesis_config(data)
            config.ingest = _parse_ingest_config(data)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file: %s", e)

    # LLM env var overrides (track env-sourced keys so they are never persisted)
    _env_llm_map = {
        "GOOGLE_API_KEY": "google_api_key",
        "GEMINI_API_KEY": "google_api_key",
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "OPENAI_API_KEY": "openai_api_key",
        "MEM42_LLM_PROVIDER": "provider",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)
            config._env_sourced_keys.add(attr)

    if os.getenv("MEM42_LLM_MODEL"):
        model_attr = f"{config.llm.provider}_model"
        if hasattr(config.llm, model_attr):
            setattr(config.llm, model_attr, os.getenv("MEM42_LLM_MODEL"))

    if os.getenv("EMBEDDING_MODE"):
        config.embedding.mode = os.getenv("EMBEDDING_MODE")
    if os.getenv("EMBEDDING_MODEL"):
        config.embedding.model = os.getenv("EMBEDDING_MODEL")
    if os.getenv("EMBEDDING_DIMENSION"):
        config.embedding.dimension = int(os.getenv("EMBEDDING_DIMENSION"))

    if os.getenv("QDRANT_URL"):
        config.qdrant.url = os.getenv("QDRANT_URL")
    if os.getenv("QDRANT_API_KEY"):
        config.qdrant.api_key = os.getenv("QDRANT_API_KEY")
        config._env_sourced_keys.add("qdrant_api_key")
    if os.getenv("QDRANT_COLLECTION"):
        config.qdrant.collection = os.getenv("QDRANT_COLLECTION")

    if os.getenv("MEM42_TOPK"):
        config.synthesis.topk = int(os.getenv("MEM42_TOPK"))

    return config


def save_config(config: Mem42Config) -> None:
    """Save configuration to file.

    API key fields that were sourced from environment variables are written
    as empty strings so that secrets are not persisted to disk.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    env_sourced = getattr(config, "_env_sourced_keys", set())

    llm_section = {
        "provider": config.llm.provider,
        "google_api_key": config.llm.google_api_key,
        "google_model": config.llm.google_model,
        "anthropic_api_key": config.llm.anthropic_api_key,
        "anthropic_model": config.llm.anthropic_model,
        "openai_api_key": config.llm.openai_api_key,
        "openai_model": config.llm.openai_model,
    }
    for key in ("google_api_key", "anthropic_api_key", "openai_api_key"):
        if key in env_sourced:
            llm_section[key] = ""

    data = {
        "llm": llm_section,
        "embedding": {
            "mode": config.embedding.mode,
            "model": config.embedding.model,
            "dimension": config.embedding.dimension,
        },
        "qdrant": {
            "url": config.qdrant.url,
            "api_key": "" if "qdrant_api_key" in env_sourced else config.qdrant.api_key,
            "collection": config.qdrant.collection,
        },
        "synthesis": {
            "topk": config.synthesis.topk,
            "plan_temperature": config.synthesis.plan_temperature,
            "synthesis_temperature": config.synthesis.synthesis_temperature,
            "always_optimize_query": config.synthesis.always_optimize_query,
        },
        "ingest": {
            "engram_temperature": config.ingest.engram_temperature,
            "max_pdf_pages": config.ingest.max_pdf_pages,
        },
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)


def ensure_directories() -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
