# src/faqtory/commands/search.py
"""Search command - find published FAQs similar to a query."""

from __future__ import annotations

import os
from pathlib import Path

from faqtory.commands.base import SearchHit, SearchResult
from faqtory.config import (
    ConfigError,
    create_faqtory,
    get_faqtory_config,
    load_config,
    resolve_data_dir,
)


def search(
    query: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    limit: int | None = None,
    min_similarity: float | None = None,
) -> SearchResult:
    """Search published FAQs.

    Args:
        query: Free text to match
        data_dir: Override data directory
        config_path: Override config file path
        limit: Number of results to return (None for settings default_k)
        min_similarity: Score floor (None for settings search_min_similarity)

    Returns:
        SearchResult with hits ordered by descending score
    """
    config = load_config(config_path)
    effective_data_dir = resolve_data_dir(data_dir, config)
    if not os.path.exists(effective_data_dir):
        return SearchResult(
            success=False,
            query=query,
            error=f"Data directory not found: {effective_data_dir}. Run 'faqtory generate' first.",
        )

    faqtory_config = get_faqtory_config(data_dir, config_path)
    if isinstance(faqtory_config, ConfigError):
        return SearchResult(success=False, query=query, error=faqtory_config.message)

    try:
        faqtory = create_faqtory(faqtory_config)
    except Exception as e:
        return SearchResult(success=False, query=query, error=f"Failed to create Faqtory: {e}")

    try:
        hits = faqtory.search(
            query,
            limit=limit if limit is not None else faqtory.settings.default_k,
            min_similarity=min_similarity,
        )
    except Exception as e:
        return SearchResult(success=False, query=query, error=f"Search failed: {e}")

    return SearchResult(
        success=True,
        query=query,
        results=[
            SearchHit(
                faq_id=hit.faq.id,
                title=hit.faq.title,
                answer=hit.faq.consolidated_answer,
                score=hit.score,
                category=hit.faq.category,
            )
            for hit in hits
        ],
    )
