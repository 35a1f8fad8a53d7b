# src/faqtory/pipeline/qualifier.py
"""Decide whether a work item is worth extracting questions from.

Automated mail (no-reply senders, bounce notices, auto-replies), spam and
very low quality messages are filtered out before any LLM call. Filtered
items complete with zero questions.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from faqtory.models import WorkItem

AUTOMATED_SENDER_PATTERNS = [
    re.compile(
        r"^(info|support|sales|admin|noreply|no-reply|donotreply|do-not-reply|"
        r"notifications?|alerts?|system|automated|mailer-daemon|postmaster)@",
        re.IGNORECASE,
    ),
    re.compile(r"@(noreply|no-reply|donotreply|notifications?)\.", re.IGNORECASE),
]

AUTOMATED_BODY_PATTERNS = [
    re.compile(r"this is an automated message", re.IGNORECASE),
    re.compile(r"please do not reply to this email", re.IGNORECASE),
    re.compile(r"this email was sent automatically", re.IGNORECASE),
]

AUTOMATED_SUBJECT_PATTERNS = [
    re.compile(r"^auto:", re.IGNORECASE),
    re.compile(r"^automatic reply", re.IGNORECASE),
    re.compile(r"^out of office", re.IGNORECASE),
    re.compile(r"^delivery status notification", re.IGNORECASE),
    re.compile(r"^undeliverable", re.IGNORECASE),
    re.compile(r"^failure notice", re.IGNORECASE),
]

SPAM_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"unsubscribe",
        r"click here to view",
        r"this email was sent to",
        r"update your preferences",
        r"promotional offer",
        r"limited time offer",
        r"act now",
        r"free gift",
        r"congratulations you've won",
        r"verify your account",
        r"suspended account",
    )
]
SPAM_RATIO = 0.3  # Share of spam patterns above which an item is spam

HTML_REMNANT = re.compile(r"<[^>]+>|&[a-z]+;", re.IGNORECASE)
REPEATED_CHARS = re.compile(r"(.)\1{5,}")
ADDRESS_IN_BRACKETS = re.compile(r"<([^>]+)>")


@dataclass
class Qualification:
    """Outcome of qualifying one item."""

    qualifies: bool
    reason: str
    score: float = 1.0


def sender_address(sender: str | None) -> str:
    """Bare lowercase address from 'Name <a@b.com>' or 'a@b.com'."""
    if not sender:
        return ""
    match = ADDRESS_IN_BRACKETS.search(sender)
    return (match.group(1) if match else sender).strip().lower()


def is_automated(item: WorkItem) -> bool:
    address = sender_address(item.sender)
    if any(p.search(address) for p in AUTOMATED_SENDER_PATTERNS):
        return True
    if any(p.search(item.body) for p in AUTOMATED_BODY_PATTERNS):
        return True
    subject = item.subject.strip()
    return any(p.search(subject) for p in AUTOMATED_SUBJECT_PATTERNS)


def is_spam(item: WorkItem) -> bool:
    text = f"{item.subject} {item.body}"
    hits = sum(1 for p in SPAM_PATTERNS if p.search(text))
    return hits / len(SPAM_PATTERNS) > SPAM_RATIO


def quality_score(item: WorkItem) -> float:
    """Heuristic 0-1 score; each weakness multiplies the score down."""
    score = 1.0
    body = item.body

    if len(body) < 50:
        score *= 0.5
    elif len(body) > 10_000:
        score *= 0.8

    if len(item.subject.strip()) < 5:
        score *= 0.7

    if len(HTML_REMNANT.findall(body)) > 20:
        score *= 0.8

    if REPEATED_CHARS.search(body):
        score *= 0.6

    words = body.split()
    if words:
        shouting = [w for w in words if len(w) > 3 and w == w.upper()]
        if len(shouting) / len(words) > 0.3:
            score *= 0.7

    return max(0.0, min(1.0, score))


class ItemQualifier:
    """Filters out items that should never reach question extraction.

    Example:
        qualifier = ItemQualifier(internal_senders=["help@acme.com"], min_quality=0.3)
        verdict = qualifier.qualify(item)
        if not verdict.qualifies:
            print(verdict.reason)
    """

    def __init__(self, internal_senders: Iterable[str] = (), min_quality: float = 0.3) -> None:
        self.internal_senders = {s.strip().lower() for s in internal_senders}
        self.min_quality = min_quality

    def qualify(self, item: WorkItem) -> Qualification:
        if sender_address(item.sender) in self.internal_senders:
            return Qualification(False, "Sent from an internal mailbox, not a customer")
        if is_automated(item):
            return Qualification(False, "Automated or system-generated message", 0.9)
        if is_spam(item):
            return Qualification(False, "Spam or promotional message", 0.8)

        score = quality_score(item)
        if score < self.min_quality:
            return Qualification(False, "Message quality too low", score)
        return Qualification(True, "Qualifies for question extraction", score)
