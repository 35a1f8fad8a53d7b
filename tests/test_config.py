# tests/test_config.py
"""Tests for configuration loading."""

import os

import pytest
import yaml

from faqtory.config import (
    DEFAULT_DATA_DIR,
    ConfigError,
    FaqtoryConfig,
    build_processor_config,
    build_settings,
    create_faqtory,
    find_config_file,
    get_faqtory,
    get_faqtory_config,
    get_settings_from_env,
    get_stores,
    import_class,
    load_config,
    load_env_file,
    resolve_data_dir,
    validate_config,
)


def write_config(directory, config, name="faqtory.yaml"):
    path = directory / name
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


class TestEnvFile:
    def test_loads_values(self, tmp_path, clean_env):
        env = tmp_path / ".env"
        env.write_text(
            '# comment\nFAQTORY_TEST_KEY="secret"\n\nnot a pair\n', encoding="utf-8"
        )

        load_env_file(env)

        assert os.environ.pop("FAQTORY_TEST_KEY") == "secret"

    def test_existing_values_win(self, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text("FAQTORY_TEST_KEY=from-file\n", encoding="utf-8")
        monkeypatch.setenv("FAQTORY_TEST_KEY", "from-env")

        load_env_file(env)

        assert os.environ["FAQTORY_TEST_KEY"] == "from-env"

    def test_missing_file(self, tmp_path):
        load_env_file(tmp_path / "absent.env")


class TestConfigFile:
    def test_found_in_parent(self, tmp_path):
        path = write_config(tmp_path, {"provider": "custom"})
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == path

    def test_explicit_path_wins_over_search(self, tmp_path, monkeypatch):
        write_config(tmp_path, {"provider": "litellm"})
        other = write_config(tmp_path, {"provider": "custom"}, name="other.yaml")
        monkeypatch.chdir(tmp_path)

        assert load_config()["provider"] == "litellm"
        assert load_config(other)["provider"] == "custom"

    def test_load_explicit_path(self, tmp_path):
        path = write_config(tmp_path, {"provider": "custom", "settings": {"max_faqs": 3}})
        assert load_config(path)["settings"] == {"max_faqs": 3}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "faqtory.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_validate_warns_on_unknown_keys(self):
        warnings = validate_config(
            {"provider": "custom", "colour": "blue", "settings": {"bogus": 1}}
        )
        assert len(warnings) == 2
        assert "colour" in warnings[0]
        assert "bogus" in warnings[1]

    def test_validate_clean_config(self):
        assert validate_config({"provider": "litellm", "processor": {"batch_size": 2}}) == []


class TestBuildSettings:
    def test_yaml_values(self):
        settings = build_settings({"settings": {"similarity_threshold": 0.9}}, env_settings={})
        assert settings.similarity_threshold == 0.9

    def test_env_overrides_yaml(self, clean_env, monkeypatch):
        monkeypatch.setenv("FAQTORY_SIMILARITY_THRESHOLD", "0.75")
        monkeypatch.setenv("FAQTORY_MAX_FAQS", "not-a-number")

        env = get_settings_from_env()
        settings = build_settings({"settings": {"similarity_threshold": 0.9}})

        assert env == {"similarity_threshold": 0.75}
        assert settings.similarity_threshold == 0.75

    def test_invalid_value_raises(self):
        with pytest.raises(ValueError):
            build_settings({"settings": {"similarity_threshold": 2.0}}, env_settings={})

    def test_processor_profile_with_overrides(self):
        config = build_processor_config(
            {"processor": {"profile": "standard", "item_timeout": 60.0}}, env_settings={}
        )
        assert config.batch_size == 5
        assert config.max_concurrency == 2
        assert config.item_timeout == 60.0

    def test_processor_env_override(self, clean_env, monkeypatch):
        monkeypatch.setenv("FAQTORY_PROCESSOR_BATCH_SIZE", "4")
        assert build_processor_config({"processor": {"batch_size": 1}}).batch_size == 4

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="Unknown profile"):
            build_processor_config({"processor": {"profile": "huge"}}, env_settings={})


class TestResolveDataDir:
    def test_precedence(self, clean_env, monkeypatch):
        assert resolve_data_dir(None, {}) == DEFAULT_DATA_DIR
        monkeypatch.setenv("FAQTORY_DATA_DIR", "/env")
        assert resolve_data_dir(None, {}) == "/env"
        assert resolve_data_dir(None, {"data_dir": "/yaml"}) == "/yaml"
        assert resolve_data_dir("/cli", {"data_dir": "/yaml"}) == "/cli"


class TestGetFaqtoryConfig:
    def test_litellm_requires_models(self, tmp_path, clean_env):
        path = write_config(tmp_path, {"provider": "litellm"})
        result = get_faqtory_config(config_path=path)
        assert isinstance(result, ConfigError)
        assert "requires llm_model" in result.message

    def test_litellm_models_from_env(self, tmp_path, clean_env, monkeypatch):
        monkeypatch.setenv("FAQTORY_LITELLM_LLM_MODEL", "openai/gpt-5-mini")
        monkeypatch.setenv("FAQTORY_LITELLM_EMBEDDING_MODEL", "openai/text-embedding-3-small")
        path = write_config(tmp_path, {"data_dir": str(tmp_path / "data")})

        result = get_faqtory_config(config_path=path)

        assert isinstance(result, FaqtoryConfig)
        assert result.provider == "litellm"
        assert result.llm_model == "openai/gpt-5-mini"
        assert result.data_dir == str(tmp_path / "data")

    def test_unknown_provider(self, tmp_path, clean_env):
        path = write_config(tmp_path, {"provider": "magic"})
        result = get_faqtory_config(config_path=path)
        assert isinstance(result, ConfigError)
        assert result.message == "Unknown provider 'magic'"

    def test_invalid_settings(self, tmp_path, clean_env):
        path = write_config(
            tmp_path, {"provider": "custom", "settings": {"min_question_count": 0}}
        )
        result = get_faqtory_config(config_path=path)
        assert isinstance(result, ConfigError)
        assert result.message.startswith("Invalid configuration")

    def test_custom_requires_all_classes(self, tmp_path, clean_env):
        path = write_config(tmp_path, {"provider": "custom", "embedder": "fakes.KeywordEmbedder"})
        result = get_faqtory_config(config_path=path)
        assert isinstance(result, ConfigError)
        assert "Custom provider requires" in result.message

    def test_custom_provider_builds_faqtory(self, config_file):
        faqtory = get_faqtory(config_path=config_file)

        assert not isinstance(faqtory, ConfigError)
        assert type(faqtory.embedder).__name__ == "KeywordEmbedder"
        assert faqtory.processor_config.batch_delay == 0.0
        assert faqtory.embedder.embed_text("password?")[0] == 1.0

    def test_custom_kwargs(self, tmp_path, clean_env):
        path = write_config(
            tmp_path,
            {
                "provider": "custom",
                "embedder": "fakes.KeywordEmbedder",
                "text_generator": "fakes.FakeTextGenerator",
                "extractor": "fakes.LineExtractor",
                "extractor_kwargs": {"confidence": 0.5},
                "data_dir": str(tmp_path / "data"),
            },
        )
        config = get_faqtory_config(config_path=path)

        faqtory = create_faqtory(config)

        assert faqtory.extractor.confidence == 0.5

    def test_create_rejects_unknown_provider(self, tmp_path):
        config = FaqtoryConfig(
            provider="magic",
            llm_model=None,
            embedding_model=None,
            data_dir=str(tmp_path),
            settings=build_settings({}, env_settings={}),
            processor_config=build_processor_config({}, env_settings={}),
        )
        with pytest.raises(ValueError, match="Unknown provider"):
            create_faqtory(config)


class TestHelpers:
    def test_get_stores_share_one_database(self, tmp_path):
        stores = get_stores(tmp_path / "data")

        assert stores["question_store"].db_path == stores["faq_store"].db_path
        assert stores["job_queue"].db_path == stores["item_store"].db_path
        assert os.path.exists(stores["faq_store"].db_path)

    def test_import_class(self):
        assert import_class("faqtory.settings.Settings").__name__ == "Settings"

    def test_import_class_missing(self):
        with pytest.raises(ModuleNotFoundError):
            import_class("no_such_module.Thing")
