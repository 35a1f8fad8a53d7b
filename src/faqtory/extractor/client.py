# src/faqtory/extractor/client.py
"""LLM-backed question extractor with a pattern-based fallback."""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from faqtory.extractor.base import QuestionExtractor
from faqtory.models import ExtractedQuestion, ExtractionResult
from faqtory.providers.base import LLMClient

logger = logging.getLogger(__name__)

QUESTION_PATTERNS = [
    re.compile(r"\?"),
    re.compile(
        r"\b(how|what|when|where|why|who|which|can|could|would|should|will|is|are|do|does|did)\b.*\?",
        re.IGNORECASE,
    ),
    re.compile(r"\b(help|assist|support|problem|issue|trouble|error)\b", re.IGNORECASE),
    re.compile(r"\b(please|kindly|could you|can you|would you)\b", re.IGNORECASE),
]

CUSTOMER_CONTEXT_PATTERNS = [
    re.compile(r"\b(customer|client|user|support|help|service)\b", re.IGNORECASE),
    re.compile(r"\b(ticket|case|inquiry|request|complaint)\b", re.IGNORECASE),
    re.compile(r"\b(thank you|thanks|regards|sincerely)\b", re.IGNORECASE),
    re.compile(r"\b(dear|hello|hi|greetings)\b", re.IGNORECASE),
]

CONVERSATION_PATTERNS = [
    re.compile(r"\b(re:|fwd:|reply|response|follow.?up)", re.IGNORECASE),
    re.compile(r"\b(previous|earlier|last|original)\s+(email|message|conversation)\b", re.IGNORECASE),
    re.compile(r"\b(as\s+discussed|as\s+mentioned|per\s+our)\b", re.IGNORECASE),
]

# Sentence openers that make a statement read as a question in the fallback path
INTERROGATIVE_START = re.compile(
    r"^(how|what|when|where|why|who|which|can|could|would|should|will|is|are|do|does|did)\b",
    re.IGNORECASE,
)

EXTRACTION_PROMPT = """Analyze the following message and identify any customer questions that would be suitable for a FAQ.

Message:
{message}

Instructions:
1. ONLY extract questions from CUSTOMERS, not from business representatives
2. Focus on genuine questions that other customers would commonly ask
3. Extract the question text as it appears in the message
4. If there's a corresponding answer in the message, extract that too
5. Ignore scheduling requests, account-specific details, spam and promotional content
6. Rate your confidence (0-1) for each question based on its FAQ suitability

Respond in JSON format:
{{
  "hasQuestions": boolean,
  "questions": [
    {{
      "question": "exact question text",
      "answer": "answer if found in the message, or null",
      "confidence": 0.0-1.0,
      "context": "surrounding context for the question",
      "category": "suggested category"
    }}
  ],
  "overallConfidence": 0.0-1.0,
  "reasoning": "brief explanation of your analysis"
}}"""

SYSTEM_PROMPT = (
    "You are an expert at analyzing customer service conversations to identify "
    "frequently asked questions."
)


class ClientQuestionExtractor(QuestionExtractor):
    """Question extractor that uses an LLMClient.

    Messages without any question, customer or conversation cue are rejected
    before the LLM is called. When the LLM call or its JSON cannot be used,
    extraction falls back to sentence pattern matching.

    Example:
        from faqtory.providers.litellm import LiteLLMClient
        from faqtory.extractor import ClientQuestionExtractor

        extractor = ClientQuestionExtractor(llm_client=LiteLLMClient(model="openai/gpt-5-mini"))
        result = extractor.extract("How do I reset my password?", subject="Login help")
    """

    FALLBACK_CONFIDENCE = 0.6

    def __init__(
        self,
        llm_client: LLMClient,
        min_confidence: float = 0.7,
        min_length: int = 10,
        max_length: int = 500,
        temperature: float | None = 0.1,
    ) -> None:
        self._client = llm_client
        self.min_confidence = min_confidence
        self.min_length = min_length
        self.max_length = max_length
        self.temperature = temperature

    @staticmethod
    def _full_text(body: str, subject: str) -> str:
        return f"Subject: {subject}\n\nBody: {body}"

    @staticmethod
    def has_cues(text: str) -> bool:
        """Cheap pre-check: does the text look like it may hold a customer question?"""
        patterns = QUESTION_PATTERNS + CUSTOMER_CONTEXT_PATTERNS + CONVERSATION_PATTERNS
        return any(p.search(text) for p in patterns)

    def _messages(self, full_text: str) -> list[dict]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": EXTRACTION_PROMPT.format(message=full_text)},
        ]

    def extract(self, body: str, subject: str = "") -> ExtractionResult:
        full_text = self._full_text(body, subject)
        if not self.has_cues(full_text):
            return _no_cues()
        try:
            response = self._client.complete(
                self._messages(full_text), temperature=self.temperature, max_tokens=1200
            )
            return self._parse_response(response)
        except Exception as e:
            logger.error("Error extracting questions, using pattern fallback: %s", e)
            return self.fallback_extract(body, subject)

    async def aextract(self, body: str, subject: str = "") -> ExtractionResult:
        full_text = self._full_text(body, subject)
        if not self.has_cues(full_text):
            return _no_cues()
        try:
            response = await self._client.acomplete(
                self._messages(full_text), temperature=self.temperature, max_tokens=1200
            )
            return self._parse_response(response)
        except Exception as e:
            logger.error("Error extracting questions, using pattern fallback: %s", e)
            return self.fallback_extract(body, subject)

    def _parse_response(self, response_text: str) -> ExtractionResult:
        """Parse the LLM JSON answer and keep only usable questions.

        Raises:
            ValueError: If no JSON object can be recovered from the response.
        """
        data = _load_json_object(response_text)

        questions: list[ExtractedQuestion] = []
        for raw in data.get("questions") or []:
            if not isinstance(raw, dict) or not isinstance(raw.get("question"), str):
                continue
            try:
                question = ExtractedQuestion(
                    question=raw["question"].strip(),
                    answer=raw.get("answer") or None,
                    confidence=float(raw.get("confidence", 0.0)),
                    context=raw.get("context") or None,
                    category=raw.get("category") or None,
                )
            except (ValidationError, TypeError, ValueError):
                logger.debug("Dropping malformed question entry: %r", raw)
                continue
            if self._keep(question):
                questions.append(question)

        overall = data.get("overallConfidence", data.get("overall_confidence", 0.0))
        try:
            overall = min(max(float(overall), 0.0), 1.0)
        except (TypeError, ValueError):
            overall = 0.0

        logger.info("Detected %d questions with confidence %.2f", len(questions), overall)
        return ExtractionResult(
            has_questions=bool(questions),
            questions=questions,
            overall_confidence=overall,
            reasoning=str(data.get("reasoning", "")),
        )

    def _keep(self, question: ExtractedQuestion) -> bool:
        return (
            question.confidence >= self.min_confidence
            and self.min_length <= len(question.question) <= self.max_length
        )

    def fallback_extract(self, body: str, subject: str = "") -> ExtractionResult:
        """Pattern-based extraction used when the LLM path fails."""
        text = f"{subject} {body}"
        questions: list[ExtractedQuestion] = []
        for match in re.finditer(r"[^.!?\n]+[.!?]*", text):
            sentence = match.group(0).strip()
            core = sentence.rstrip(".!?").strip()
            if not core:
                continue
            if not (sentence.endswith("?") or INTERROGATIVE_START.match(core)):
                continue
            if not self.min_length <= len(core) <= self.max_length:
                continue
            questions.append(
                ExtractedQuestion(
                    question=f"{core}?",
                    confidence=self.FALLBACK_CONFIDENCE,
                    context=core,
                )
            )

        return ExtractionResult(
            has_questions=bool(questions),
            questions=questions,
            overall_confidence=self.FALLBACK_CONFIDENCE if questions else 0.2,
            reasoning="Fallback pattern-based detection",
        )


def _no_cues() -> ExtractionResult:
    return ExtractionResult(
        has_questions=False,
        overall_confidence=0.1,
        reasoning="No question patterns, customer context, or conversation indicators detected",
    )


def _load_json_object(response_text: str) -> dict[str, Any]:
    text = response_text.strip()

    # Handle potential markdown code blocks
    fence = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL)
    if fence:
        text = fence.group(1).strip()

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        # Recover an object embedded in surrounding prose
        match = re.search(r"\{[\s\S]*\}", text)
        if not match:
            raise ValueError(f"No valid JSON found in response: {text[:200]}") from None
        parsed = json.loads(match.group(0))

    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object in response")
    return parsed
