# src/faqtory/config.py
"""Configuration loading utilities for faqtory.

This module provides configuration loading that can be used by:
- CLI commands
- Workers started by a process manager
- External applications using faqtory as a library

It handles:
- Finding and loading faqtory.yaml config files
- Loading .env files for API keys
- Building Settings and ProcessorConfig objects from YAML and FAQTORY_* env vars
- Creating Faqtory instances from configuration
"""

from __future__ import annotations

import importlib
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypedDict, cast

import yaml  # type: ignore[import-untyped]

if TYPE_CHECKING:
    from faqtory.faqtory import Faqtory
    from faqtory.pipeline.queue import JobQueue
    from faqtory.settings import ProcessorConfig, Settings
    from faqtory.stores import SQLiteFAQStore, SQLiteItemStore, SQLiteQuestionStore

logger = logging.getLogger(__name__)

# Default paths
DEFAULT_DATA_DIR = "./faqtory_data"
CONFIG_FILES = ["faqtory.yaml", "faqtory.yml", ".faqtoryrc"]
ENV_FILE = ".env"


class StoreBundle(TypedDict):
    """Bundle of store instances for operations that need no provider."""

    question_store: SQLiteQuestionStore
    faq_store: SQLiteFAQStore
    item_store: SQLiteItemStore
    job_queue: JobQueue


@dataclass
class ConfigError:
    """Error during configuration loading."""

    message: str
    suggestion: str | None = None


def load_env_file(env_path: str | Path = ENV_FILE) -> None:
    """Load environment variables from a .env file if it exists.

    Existing environment variables are never overridden.

    Args:
        env_path: Path to .env file (default: .env in current directory)
    """
    path = Path(env_path)
    if not path.exists():
        return

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("\"'")
            if key and key not in os.environ:
                os.environ[key] = value


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find a configuration file in the given directory or its parents.

    Args:
        start_dir: Directory to start searching from (default: cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir or Path.cwd()
    for _ in range(10):  # Limit search depth
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists():
                return config_path
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


VALID_ROOT_KEYS = {
    "provider",
    "llm_model",
    "embedding_model",
    "data_dir",
    # Custom provider
    "embedder",
    "text_generator",
    "extractor",
    "embedder_kwargs",
    "text_generator_kwargs",
    "extractor_kwargs",
    # Sections
    "settings",
    "processor",
}


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


SETTINGS_TYPES: dict[str, Callable[[str], Any]] = {
    "similarity_threshold": float,
    "max_candidates": int,
    "min_question_count": int,
    "max_faqs": int,
    "auto_publish_threshold": int,
    "question_confidence_threshold": float,
    "min_question_length": int,
    "max_question_length": int,
    "min_item_quality": float,
    "internal_senders": _split_csv,
    "search_min_similarity": float,
    "default_k": int,
    "embedding_cache_size": int,
    "num_retries": int,
}

PROCESSOR_TYPES: dict[str, Callable[[str], Any]] = {
    "profile": str,
    "batch_size": int,
    "max_concurrency": int,
    "memory_threshold_bytes": int,
    "gc_interval": int,
    "item_timeout": float,
    "max_consecutive_errors": int,
    "max_total_errors": int,
    "batch_delay": float,
    "max_body_chars": int,
}


def validate_config(config: dict[str, Any], config_path: Path | None = None) -> list[str]:
    """Validate config and return warnings about unknown keys.

    Args:
        config: The loaded configuration dictionary
        config_path: Path to config file (for error messages)

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    unknown_root = set(config.keys()) - VALID_ROOT_KEYS
    if unknown_root:
        path_str = str(config_path) if config_path else "config"
        warnings.append(f"Unknown config keys in {path_str}: {', '.join(sorted(unknown_root))}")

    for section, valid in (("settings", SETTINGS_TYPES), ("processor", PROCESSOR_TYPES)):
        values = config.get(section, {})
        if isinstance(values, dict):
            unknown = set(values.keys()) - set(valid)
            if unknown:
                warnings.append(f"Unknown {section} keys: {', '.join(sorted(unknown))}")

    return warnings


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Explicit path to config file, or None to search

    Returns:
        Configuration dictionary (empty if no config found)
    """
    path = Path(config_path) if config_path is not None else find_config_file()
    if path is None:
        return {}

    with open(path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    for warning in validate_config(config, path):
        logger.warning(warning)
    return cast(dict[str, Any], config)


def _read_env(prefix: str, types: dict[str, Callable[[str], Any]]) -> dict[str, Any]:
    """Read explicitly set env vars like FAQTORY_<NAME>, skipping unparsable values."""
    result: dict[str, Any] = {}
    for name, kind in types.items():
        raw = os.environ.get(f"{prefix}{name.upper()}")
        if raw is None or raw == "":
            continue
        try:
            result[name] = kind(raw)
        except ValueError:
            logger.warning("Ignoring invalid value for %s%s: %r", prefix, name.upper(), raw)
    return result


def get_settings_from_env() -> dict[str, Any]:
    """Read behavioral settings from FAQTORY_* environment variables."""
    return _read_env("FAQTORY_", SETTINGS_TYPES)


def get_processor_from_env() -> dict[str, Any]:
    """Read processor settings from FAQTORY_PROCESSOR_* environment variables."""
    return _read_env("FAQTORY_PROCESSOR_", PROCESSOR_TYPES)


def build_settings(
    config: dict[str, Any] | None = None,
    env_settings: dict[str, Any] | None = None,
) -> Settings:
    """Build Settings from YAML config and env vars.

    Precedence (highest to lowest):
    1. Environment variables (for CI/CD override)
    2. YAML settings: section
    3. Settings class defaults
    """
    from faqtory.settings import Settings

    config = config or {}
    yaml_settings = {
        k: v for k, v in (config.get("settings") or {}).items() if k in SETTINGS_TYPES
    }
    env_settings = env_settings if env_settings is not None else get_settings_from_env()
    return Settings(**{**yaml_settings, **env_settings})


def build_processor_config(
    config: dict[str, Any] | None = None,
    env_settings: dict[str, Any] | None = None,
) -> ProcessorConfig:
    """Build ProcessorConfig from the YAML processor: section and env vars.

    A `profile` key selects a preset; the remaining keys override it.
    """
    from faqtory.settings import ProcessorConfig

    config = config or {}
    yaml_values = {
        k: v for k, v in (config.get("processor") or {}).items() if k in PROCESSOR_TYPES
    }
    env_settings = env_settings if env_settings is not None else get_processor_from_env()
    merged = {**yaml_values, **env_settings}

    profile = merged.pop("profile", None)
    if profile:
        return ProcessorConfig.with_profile(profile, **merged)
    return ProcessorConfig(**merged)


def resolve_data_dir(data_dir: str | None, config: dict[str, Any]) -> str:
    """Data directory from the override, the config file, FAQTORY_DATA_DIR, or the default."""
    return cast(
        str,
        data_dir
        or config.get("data_dir")
        or os.environ.get("FAQTORY_DATA_DIR")
        or DEFAULT_DATA_DIR,
    )


def get_stores(data_dir: str | Path) -> StoreBundle:
    """Get store instances for operations that need no provider (list, status, delete)."""
    from faqtory.configuration import LocalStorage
    from faqtory.pipeline.queue import JobQueue
    from faqtory.stores import SQLiteFAQStore, SQLiteItemStore, SQLiteQuestionStore

    db_path = LocalStorage(str(data_dir)).db_path
    return {
        "question_store": SQLiteQuestionStore(db_path),
        "faq_store": SQLiteFAQStore(db_path),
        "item_store": SQLiteItemStore(db_path),
        "job_queue": JobQueue(db_path),
    }


def import_class(class_path: str) -> type[Any]:
    """Import a class from a dotted path like 'my_package.module.ClassName'."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return cast(type[Any], getattr(module, class_name))


@dataclass
class FaqtoryConfig:
    """Configuration for creating a Faqtory instance."""

    provider: str
    llm_model: str | None
    embedding_model: str | None
    data_dir: str
    settings: Settings
    processor_config: ProcessorConfig
    # Custom provider fields
    embedder_class: str | None = None
    text_generator_class: str | None = None
    extractor_class: str | None = None
    embedder_kwargs: dict[str, Any] | None = None
    text_generator_kwargs: dict[str, Any] | None = None
    extractor_kwargs: dict[str, Any] | None = None


def get_faqtory_config(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> FaqtoryConfig | ConfigError:
    """Resolve configuration without creating the instance.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        FaqtoryConfig, or ConfigError if invalid
    """
    config = load_config(config_path)
    effective_data_dir = resolve_data_dir(data_dir, config)
    provider = config.get("provider", "litellm")

    try:
        settings = build_settings(config)
        processor_config = build_processor_config(config)
    except ValueError as e:
        return ConfigError(message=f"Invalid configuration: {e}")

    if provider == "litellm":
        llm_model = config.get("llm_model") or os.environ.get("FAQTORY_LITELLM_LLM_MODEL")
        embedding_model = config.get("embedding_model") or os.environ.get(
            "FAQTORY_LITELLM_EMBEDDING_MODEL"
        )
        if not llm_model or not embedding_model:
            return ConfigError(
                message="LiteLLM provider requires llm_model and embedding_model.",
                suggestion="Set them in faqtory.yaml or FAQTORY_LITELLM_* env vars",
            )
        return FaqtoryConfig(
            provider=provider,
            llm_model=llm_model,
            embedding_model=embedding_model,
            data_dir=effective_data_dir,
            settings=settings,
            processor_config=processor_config,
        )

    if provider == "custom":
        classes = [config.get(k) for k in ("embedder", "text_generator", "extractor")]
        if not all(classes):
            return ConfigError(
                message="Custom provider requires embedder, text_generator, and extractor.",
                suggestion="Add these to faqtory.yaml as dotted class paths",
            )
        return FaqtoryConfig(
            provider=provider,
            llm_model=None,
            embedding_model=None,
            data_dir=effective_data_dir,
            settings=settings,
            processor_config=processor_config,
            embedder_class=classes[0],
            text_generator_class=classes[1],
            extractor_class=classes[2],
            embedder_kwargs=config.get("embedder_kwargs", {}),
            text_generator_kwargs=config.get("text_generator_kwargs", {}),
            extractor_kwargs=config.get("extractor_kwargs", {}),
        )

    return ConfigError(
        message=f"Unknown provider '{provider}'",
        suggestion="Supported providers: litellm, custom",
    )


@dataclass(frozen=True)
class _CustomProvider:
    """Provider wrapping pre-built custom components."""

    embedder: Any
    text_generator: Any
    extractor: Any

    def build_embedder(self, settings: Settings) -> Any:
        return self.embedder

    def build_text_generator(self, settings: Settings) -> Any:
        return self.text_generator

    def build_extractor(self, settings: Settings) -> Any:
        return self.extractor

    def build_llm_client(self, settings: Settings | None = None) -> Any:
        raise NotImplementedError("Custom provider does not support build_llm_client")


def create_faqtory(config: FaqtoryConfig) -> Faqtory:
    """Create a Faqtory instance from configuration.

    Raises:
        ImportError: If custom provider classes cannot be imported
    """
    from faqtory.configuration import LiteLLMProvider, LocalStorage
    from faqtory.faqtory import Faqtory

    if config.provider == "litellm":
        if not config.llm_model or not config.embedding_model:
            raise ValueError("LiteLLM provider requires llm_model and embedding_model")
        provider: Any = LiteLLMProvider(llm=config.llm_model, embedding=config.embedding_model)

    elif config.provider == "custom":
        if not all([config.embedder_class, config.text_generator_class, config.extractor_class]):
            raise ValueError("Custom provider requires all class paths")
        provider = _CustomProvider(
            embedder=import_class(cast(str, config.embedder_class))(
                **(config.embedder_kwargs or {})
            ),
            text_generator=import_class(cast(str, config.text_generator_class))(
                **(config.text_generator_kwargs or {})
            ),
            extractor=import_class(cast(str, config.extractor_class))(
                **(config.extractor_kwargs or {})
            ),
        )

    else:
        raise ValueError(f"Unknown provider: {config.provider}")

    return Faqtory(
        provider=provider,
        storage=LocalStorage(config.data_dir),
        settings=config.settings,
        processor_config=config.processor_config,
    )


def get_faqtory(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> Faqtory | ConfigError:
    """Create a Faqtory instance based on configuration.

    Combines get_faqtory_config and create_faqtory.
    """
    config = get_faqtory_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return config
    return create_faqtory(config)
