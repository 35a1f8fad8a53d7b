# tests/commands/test_process_command.py
"""Tests for the process command."""

import json
import os

import pytest
import yaml

from faqtory.commands import CommandStage, process
from faqtory.commands.process import load_items


class TestLoadItems:
    """Tests for process.load_items()."""

    def test_json_lines(self, items_file) -> None:
        items = load_items(items_file)

        assert [item.id for item in items] == ["item-1", "item-2", "item-3", "item-4"]
        assert items[3].subject == "Billing"

    def test_json_array(self, temp_dir) -> None:
        path = os.path.join(temp_dir, "items.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump([{"body": "Where is my refund?"}], f)

        assert load_items(path)[0].body == "Where is my refund?"

    def test_empty_file(self, temp_dir) -> None:
        path = os.path.join(temp_dir, "empty.jsonl")
        open(path, "w").close()

        assert load_items(path) == []

    def test_rejects_non_objects(self, temp_dir) -> None:
        path = os.path.join(temp_dir, "bad.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(["just a string"], f)

        with pytest.raises(ValueError, match="JSON objects"):
            load_items(path)


class TestProcessCommand:
    """Tests for process.process()."""

    def test_submit_and_process(self, config_file, items_file) -> None:
        """Items from the file are stored, then every pending item is processed."""
        updates = []

        result = process.process(
            config_path=config_file, items_path=items_file, on_progress=updates.append
        )

        assert result.success is True
        assert result.status == "completed"
        assert result.submitted == 4
        assert result.total_items == 4
        assert result.processed == 4
        assert result.questions_found == 4
        assert result.failures == []
        assert updates[0].stage == CommandStage.SUBMITTING
        assert updates[-1].stage == CommandStage.COMPLETE
        assert [u.current for u in updates if u.stage == CommandStage.EXTRACTING] == [1, 2, 3, 4]

    def test_resubmission_is_a_no_op(self, config_file, items_file) -> None:
        """Submitting the same file twice stores nothing new and processes nothing."""
        process.process(config_path=config_file, items_path=items_file)

        result = process.process(config_path=config_file, items_path=items_file)

        assert result.success is True
        assert result.submitted == 0
        assert result.total_items == 0

    def test_limit(self, config_file, items_file) -> None:
        result = process.process(config_path=config_file, items_path=items_file, limit=1)

        assert result.processed == 1
        assert process.process(config_path=config_file).processed == 3

    def test_failed_items_are_reported(self, config_file, temp_dir) -> None:
        """An item the extractor rejects fails without stopping the run."""
        path = os.path.join(temp_dir, "items.jsonl")
        with open(path, "w", encoding="utf-8") as f:
            f.write(json.dumps({"id": "bad", "body": "FAIL"}) + "\n")
            f.write(json.dumps({"id": "good", "body": "Where is my refund?"}) + "\n")

        result = process.process(config_path=config_file, items_path=path)

        assert result.success is True
        assert result.errors == 1
        assert result.failures == [("bad", "extractor failed")]

    def test_profile(self, config_file, items_file) -> None:
        result = process.process(
            config_path=config_file, items_path=items_file, profile="standard"
        )
        assert result.processed == 4

    def test_unknown_profile(self, config_file) -> None:
        result = process.process(config_path=config_file, profile="enormous")

        assert result.success is False
        assert "Unknown profile" in result.error

    def test_missing_items_file(self, config_file, temp_dir) -> None:
        result = process.process(
            config_path=config_file, items_path=os.path.join(temp_dir, "absent.jsonl")
        )

        assert result.success is False
        assert result.error.startswith("Failed to read items")

    def test_configuration_error(self, temp_dir, clean_env) -> None:
        """A litellm config without model names fails before touching the database."""
        path = os.path.join(temp_dir, "faqtory.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"provider": "litellm", "data_dir": os.path.join(temp_dir, "d")}, f)

        result = process.process(config_path=path)

        assert result.success is False
        assert "requires llm_model" in result.error
        assert not os.path.exists(os.path.join(temp_dir, "d"))

    def test_custom_class_import_failure(self, temp_dir, clean_env) -> None:
        path = os.path.join(temp_dir, "faqtory.yaml")
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                {
                    "provider": "custom",
                    "embedder": "fakes.NoSuchEmbedder",
                    "text_generator": "fakes.FakeTextGenerator",
                    "extractor": "fakes.LineExtractor",
                    "data_dir": os.path.join(temp_dir, "data"),
                },
                f,
            )

        result = process.process(config_path=path)

        assert result.success is False
        assert result.error.startswith("Failed to create Faqtory")
