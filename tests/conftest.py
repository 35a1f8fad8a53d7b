"""Shared pytest fixtures."""

import json
import os
import tempfile

import pytest
from fakes import FakeProvider, FakeTextGenerator, KeywordEmbedder, LineExtractor


@pytest.fixture
def temp_dir():
    """Create a temporary directory for stores."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def db_path(temp_dir):
    return os.path.join(temp_dir, "faqtory.db")


@pytest.fixture
def question_store(db_path):
    from faqtory.stores import SQLiteQuestionStore

    return SQLiteQuestionStore(db_path)


@pytest.fixture
def faq_store(db_path):
    from faqtory.stores import SQLiteFAQStore

    return SQLiteFAQStore(db_path)


@pytest.fixture
def item_store(db_path):
    from faqtory.stores import SQLiteItemStore

    return SQLiteItemStore(db_path)


@pytest.fixture
def job_queue(db_path):
    from faqtory.pipeline import JobQueue

    # Eager: enqueued jobs run in the test process
    return JobQueue(db_path, backoff_base=0.0, eager=True)


@pytest.fixture
def mock_embedder():
    """Keyword embedder: texts about the same topic embed identically."""
    return KeywordEmbedder()


@pytest.fixture
def mock_generator():
    return FakeTextGenerator()


@pytest.fixture
def mock_extractor():
    return LineExtractor()


@pytest.fixture
def mock_provider(mock_embedder, mock_generator, mock_extractor):
    """Provider wrapping the mock components (satisfies ProviderConfig)."""
    return FakeProvider(
        embedder=mock_embedder,
        text_generator=mock_generator,
        extractor=mock_extractor,
    )


@pytest.fixture
def faqtory(temp_dir, mock_provider):
    """Faqtory over local storage in a temp dir, with fake collaborators."""
    from faqtory import Faqtory, LocalStorage, ProcessorConfig

    return Faqtory(
        provider=mock_provider,
        storage=LocalStorage(temp_dir),
        processor_config=ProcessorConfig(batch_delay=0.0),
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Drop FAQTORY_* variables so host configuration does not leak into tests."""
    for key in list(os.environ):
        if key.startswith("FAQTORY_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config_file(temp_dir, clean_env):
    """faqtory.yaml wiring the fake collaborators through the custom provider."""
    import yaml

    path = os.path.join(temp_dir, "faqtory.yaml")
    config = {
        "provider": "custom",
        "embedder": "fakes.KeywordEmbedder",
        "text_generator": "fakes.FakeTextGenerator",
        "extractor": "fakes.LineExtractor",
        "data_dir": os.path.join(temp_dir, "data"),
        "processor": {"batch_delay": 0.0},
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)
    return path


ITEMS = [
    {"id": "item-1", "subject": "Login", "body": "How do I reset my password?"},
    {"id": "item-2", "subject": "Login", "body": "I forgot my password, what now?"},
    {"id": "item-3", "subject": "Login", "body": "Password reset email never arrived?"},
    {"id": "item-4", "subject": "Billing", "body": "Where is my refund?"},
]


@pytest.fixture
def items_file(temp_dir):
    """JSON Lines file with three password questions and one refund question."""
    path = os.path.join(temp_dir, "items.jsonl")
    with open(path, "w", encoding="utf-8") as f:
        for item in ITEMS:
            f.write(json.dumps(item) + "\n")
    return path


@pytest.fixture
def populated(config_file, items_file):
    """Run process and generate so the database holds one FAQ group."""
    from faqtory.commands import generate, process

    assert process.process(config_path=config_file, items_path=items_file).success
    assert generate.generate(config_path=config_file).generated == 1
    return config_file
