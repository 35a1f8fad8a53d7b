# src/faqtory/commands/status.py
"""Status command - show database statistics.

Reads the stores directly, so it works without provider credentials.
"""

from __future__ import annotations

import os
from pathlib import Path

from faqtory.commands.base import StatusResult
from faqtory.config import get_stores, load_config, resolve_data_dir
from faqtory.similarity import SimilarityMatrix, find_duplicate_pairs, similarity_distribution

SIMILARITY_SAMPLE = 200  # Generation candidates scanned for pair statistics


def status(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> StatusResult:
    """Get database statistics.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        StatusResult with question, item, FAQ and job counts, plus the
        similarity spread of the top generation candidates
    """
    config = load_config(config_path)
    effective_data_dir = resolve_data_dir(data_dir, config)

    if not os.path.exists(effective_data_dir):
        return StatusResult(success=True)

    try:
        stores = get_stores(effective_data_dir)
    except Exception as e:
        return StatusResult(success=False, error=f"Failed to access database: {e}")

    faq_stats = stores["faq_store"].stats()
    candidates = stores["question_store"].list_for_generation(0.0, SIMILARITY_SAMPLE)
    try:
        matrix = SimilarityMatrix(
            [q.id for q in candidates], {q.id: q.embedding for q in candidates if q.embedding}
        )
    except ValueError as e:
        return StatusResult(success=False, error=f"Cannot compare stored embeddings: {e}")

    return StatusResult(
        success=True,
        total_questions=stores["question_store"].count(),
        items=stores["item_store"].count_by_status(),
        total_groups=faq_stats["total_groups"],
        published_groups=faq_stats["published_groups"],
        grouped_questions=faq_stats["grouped_questions"],
        avg_group_size=faq_stats["avg_group_size"],
        categories=faq_stats["categories"],
        jobs=stores["job_queue"].stats(),
        similarity=similarity_distribution(matrix),
        duplicate_pairs=len(find_duplicate_pairs(matrix)),
    )
