# tests/commands/test_generate_command.py
"""Tests for the generate command."""

from faqtory.commands import faqs, generate, process


class TestGenerateCommand:
    """Tests for generate.generate()."""

    def test_generate_after_processing(self, config_file, items_file) -> None:
        """Three password questions become one FAQ; the refund singleton does not."""
        process.process(config_path=config_file, items_path=items_file)

        result = generate.generate(config_path=config_file)

        assert result.success is True
        assert result.processed == 4
        assert result.generated == 1
        assert result.errors == 0
        assert result.duration >= 0

    def test_second_run_changes_nothing(self, populated) -> None:
        result = generate.generate(config_path=populated)

        assert result.success is True
        assert result.generated == 0
        assert result.updated == 0

    def test_min_question_count_override(self, config_file, items_file) -> None:
        """Lowering the minimum turns the singleton into an FAQ too."""
        process.process(config_path=config_file, items_path=items_file)

        result = generate.generate(config_path=config_file, min_question_count=1)

        assert result.generated == 2
        assert faqs.list_faqs(config_path=config_file).total == 2

    def test_max_faqs_override(self, config_file, items_file) -> None:
        process.process(config_path=config_file, items_path=items_file)

        result = generate.generate(config_path=config_file, min_question_count=1, max_faqs=1)

        assert result.generated == 1

    def test_empty_database(self, config_file) -> None:
        result = generate.generate(config_path=config_file)

        assert result.success is True
        assert result.processed == 0
        assert result.generated == 0
