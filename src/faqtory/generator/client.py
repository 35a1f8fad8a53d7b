# src/faqtory/generator/client.py
"""LLM-backed text generator with deterministic fallbacks."""

import logging

from faqtory.generator.base import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    TextGenerator,
    fallback_answer,
)
from faqtory.providers.base import LLMClient

logger = logging.getLogger(__name__)

CONSOLIDATE_PROMPT = """Create a comprehensive FAQ answer based on these similar customer questions and existing answers:

Questions:
{questions}

Existing Answers:
{answers}

Instructions:
1. Create one clear, comprehensive answer that addresses all the questions
2. Make it helpful and actionable for customers
3. Use a professional but friendly tone
4. Include relevant details from the existing answers
5. Structure it clearly with bullet points or steps if needed
6. Keep it concise but complete

Respond with just the consolidated answer, nothing else."""

CATEGORIZE_PROMPT = """Categorize the following customer question into one of these categories:

Categories:
{categories}

Question: {text}

Respond with just the category name, nothing else."""

TAGS_PROMPT = """Extract 3-5 relevant keywords/tags from this customer question that would help with searching and organization:

Question: {text}

Instructions:
1. Focus on the main topics and concepts
2. Use single words or short phrases
3. Make them searchable and relevant
4. Avoid common words like "the", "and", etc.

Respond with a comma-separated list of tags, nothing else."""

IMPROVE_PROMPT = """Improve the following customer question to make it clearer and more suitable for a FAQ:

Original Question: {text}
Context: {context}

Instructions:
1. Make the question clear and grammatically correct
2. Ensure it's general enough to help other customers
3. Remove any personal or specific details
4. Keep the core meaning intact
5. Make it concise but complete

Respond with just the improved question text, nothing else."""


class ClientTextGenerator(TextGenerator):
    """Text generator that uses an LLMClient.

    Example:
        from faqtory.providers.litellm import LiteLLMClient
        from faqtory.generator import ClientTextGenerator

        generator = ClientTextGenerator(llm_client=LiteLLMClient(model="openai/gpt-5-mini"))
        answer = generator.consolidate(["How do I reset my password?"], [])
    """

    def __init__(self, llm_client: LLMClient, temperature: float | None = 0.2) -> None:
        """Initialize the generator.

        Args:
            llm_client: Any LLMClient implementation
            temperature: Base temperature for generation. None to use model default.
        """
        self._client = llm_client
        self.temperature = temperature

    def _ask(self, system: str, prompt: str, max_tokens: int, temperature: float | None) -> str:
        response = self._client.complete(
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature if temperature is not None else self.temperature,
            max_tokens=max_tokens,
        )
        text = response.strip()
        if not text:
            raise ValueError("LLM returned empty text")
        return text

    def consolidate(self, questions: list[str], answers: list[str]) -> str:
        non_empty = [a for a in answers if a and a.strip()]
        try:
            return self._ask(
                "You are an expert at creating helpful FAQ answers that consolidate "
                "information from multiple customer interactions.",
                CONSOLIDATE_PROMPT.format(
                    questions="\n".join(f"{i + 1}. {q}" for i, q in enumerate(questions)),
                    answers="\n".join(f"{i + 1}. {a}" for i, a in enumerate(non_empty)),
                ),
                max_tokens=500,
                temperature=0.3,
            )
        except Exception as e:
            logger.error("Error generating consolidated answer: %s", e)
            return fallback_answer(answers)

    def categorize(self, text: str) -> str:
        try:
            category = self._ask(
                "You are an expert at categorizing customer service questions.",
                CATEGORIZE_PROMPT.format(
                    categories="\n".join(f"- {c}" for c in CATEGORIES), text=text
                ),
                max_tokens=50,
                temperature=0.1,
            )
        except Exception as e:
            logger.error("Error categorizing question: %s", e)
            return DEFAULT_CATEGORY
        # Models sometimes echo the list marker or add punctuation
        category = category.lstrip("-* ").rstrip(".").strip()
        for known in CATEGORIES:
            if category.lower() == known.lower():
                return known
        return category or DEFAULT_CATEGORY

    def extract_tags(self, text: str) -> list[str]:
        try:
            raw = self._ask(
                "You are an expert at extracting relevant keywords and tags from text.",
                TAGS_PROMPT.format(text=text),
                max_tokens=100,
                temperature=0.2,
            )
        except Exception as e:
            logger.error("Error extracting tags: %s", e)
            return []
        tags = [tag.strip().lower() for tag in raw.split(",")]
        return list(dict.fromkeys(tag for tag in tags if tag))

    def improve(self, text: str, context: str = "") -> str:
        try:
            return self._ask(
                "You are an expert at improving customer service questions for FAQ "
                "sections. Focus on clarity and generalizability.",
                IMPROVE_PROMPT.format(text=text, context=context),
                max_tokens=200,
                temperature=0.2,
            )
        except Exception as e:
            logger.error("Error improving question text: %s", e)
            return text
