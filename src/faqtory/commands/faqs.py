# src/faqtory/commands/faqs.py
"""FAQ commands - list, show, publish and delete FAQ groups.

These read and edit the FAQ store directly and need no provider.
"""

from __future__ import annotations

import os
from pathlib import Path

from faqtory.commands.base import (
    ConfirmCallback,
    ConfirmRequest,
    FAQDeleteResult,
    FAQDetailResult,
    FAQInfo,
    FAQListResult,
    FAQUpdateResult,
    MemberInfo,
)
from faqtory.config import StoreBundle, get_stores, load_config, resolve_data_dir

NO_DATABASE = "No database found. Run 'faqtory process' first."


def _open_stores(
    data_dir: str | None, config_path: str | Path | None
) -> StoreBundle | str | None:
    """Stores for the configured data directory, an error message, or None if absent."""
    config = load_config(config_path)
    effective_data_dir = resolve_data_dir(data_dir, config)
    if not os.path.exists(effective_data_dir):
        return None
    try:
        return get_stores(effective_data_dir)
    except Exception as e:
        return f"Failed to access database: {e}"


def list_faqs(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    page: int = 1,
    limit: int = 20,
    category: str | None = None,
    published: bool | None = None,
    search: str | None = None,
    sort_by: str = "frequency_score",
) -> FAQListResult:
    """List FAQ groups, one page at a time, most frequent first."""
    stores = _open_stores(data_dir, config_path)
    if stores is None:
        return FAQListResult(success=True, page=page, limit=limit)
    if isinstance(stores, str):
        return FAQListResult(success=False, error=stores)

    try:
        groups, total = stores["faq_store"].list_groups(
            page=page,
            limit=limit,
            category=category,
            published=published,
            search=search,
            sort_by=sort_by,
        )
    except ValueError as e:
        return FAQListResult(success=False, error=str(e))

    return FAQListResult(
        success=True,
        faqs=[
            FAQInfo(
                id=g.id,
                title=g.title,
                question_count=g.question_count,
                frequency_score=g.frequency_score,
                is_published=g.is_published,
                category=g.category,
                tags=g.tags,
            )
            for g in groups
        ],
        total=total,
        page=page,
        limit=limit,
    )


def show_faq(
    faq_id: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> FAQDetailResult:
    """Show one FAQ group with its member questions."""
    stores = _open_stores(data_dir, config_path)
    if stores is None or isinstance(stores, str):
        return FAQDetailResult(success=False, error=stores or NO_DATABASE)

    faq_store = stores["faq_store"]
    group = faq_store.get(faq_id)
    if group is None:
        return FAQDetailResult(success=False, error=f"FAQ not found: {faq_id}")

    texts = {q.id: q.text for q in faq_store.get_member_questions(faq_id)}
    members = [
        MemberInfo(
            question_id=a.question_id,
            text=texts.get(a.question_id, ""),
            similarity_score=a.similarity_score,
            is_representative=a.is_representative,
        )
        for a in faq_store.get_associations(faq_id)
    ]
    return FAQDetailResult(
        success=True,
        faq=group.model_dump(mode="json", exclude={"representative_embedding"}),
        members=members,
    )


def set_published(
    faq_id: str,
    published: bool,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> FAQUpdateResult:
    """Publish or unpublish an FAQ group."""
    stores = _open_stores(data_dir, config_path)
    if stores is None or isinstance(stores, str):
        return FAQUpdateResult(success=False, faq_id=faq_id, error=stores or NO_DATABASE)

    group = stores["faq_store"].update_fields(faq_id, is_published=published)
    if group is None:
        return FAQUpdateResult(success=False, faq_id=faq_id, error=f"FAQ not found: {faq_id}")
    return FAQUpdateResult(success=True, faq_id=faq_id, is_published=group.is_published)


def delete_faq(
    faq_id: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    on_confirm: ConfirmCallback | None = None,
) -> FAQDeleteResult:
    """Delete an FAQ group and release its questions for regrouping.

    Args:
        faq_id: Group to delete
        data_dir: Override data directory
        config_path: Override config file path
        on_confirm: Optional confirmation callback. If None, deletion proceeds
            without confirmation (equivalent to --force).
    """
    stores = _open_stores(data_dir, config_path)
    if stores is None or isinstance(stores, str):
        return FAQDeleteResult(success=False, faq_id=faq_id, error=stores or NO_DATABASE)

    faq_store = stores["faq_store"]
    group = faq_store.get(faq_id)
    if group is None:
        return FAQDeleteResult(success=False, faq_id=faq_id, error=f"FAQ not found: {faq_id}")

    released = len(faq_store.get_associations(faq_id))
    if on_confirm is not None:
        request = ConfirmRequest(
            message=f"Delete FAQ '{group.title}'?",
            details=f"This will release {released} questions from the group.",
        )
        if not on_confirm(request):
            return FAQDeleteResult(success=False, faq_id=faq_id, error="Cancelled.")

    faq_store.delete(faq_id)
    return FAQDeleteResult(success=True, faq_id=faq_id, questions_released=released)
