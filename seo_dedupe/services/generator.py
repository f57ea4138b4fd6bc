from __future__ import annotations

import logging

from .llm_client import TextGenerator
from .prompts import FieldCategory, build_prompt
from .sanitizer import TRIPLE_QUOTE, clean_variation

"""Variation generation for a single duplicated field.

classify_field picks the prompt family from the column name; VariationGenerator
builds the prompt, calls the text-generation client once and sanitizes the
reply. A reply starting with a triple quote is rejected outright
(MalformedResponseError) instead of being cleaned: that prefix means the model
echoed the escaped payload and the rest of the text cannot be trusted.
"""

__all__ = [
    "GenerationError",
    "MalformedResponseError",
    "classify_field",
    "VariationGenerator",
]

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 100


class GenerationError(Exception):
    """Any failure of the text-generation call itself."""


class MalformedResponseError(Exception):
    """Model reply started with a triple quote; this generation is aborted."""


def classify_field(field_name: str) -> FieldCategory:
    """Map a column name to its prompt category.

    Precedence: "title" > "description" (only without "html") > "html" > general.
    So "Body HTML Description" is HTML, not DESCRIPTION.
    """
    lowered = field_name.lower()
    if "title" in lowered:
        return FieldCategory.TITLE
    if "description" in lowered and "html" not in lowered:
        return FieldCategory.DESCRIPTION
    if "html" in lowered:
        return FieldCategory.HTML
    return FieldCategory.GENERAL


def _preview(text: str) -> str:
    return text[:PREVIEW_CHARS] + ("..." if len(text) > PREVIEW_CHARS else "")


class VariationGenerator:
    def __init__(self, client: TextGenerator, model: str) -> None:
        self.client = client
        self.model = model

    async def generate(
        self, original_text: str, handle: str, field_name: str, model: str | None = None
    ) -> str:
        """Return a cleaned rewrite of original_text.

        model overrides the generator default for this call only.

        Raises:
            MalformedResponseError: reply starts with a triple quote
            GenerationError: the client call failed
        """
        category = classify_field(field_name)
        logger.debug(
            f"Generating variation field={field_name!r} category={category.value} "
            f"handle={handle!r} original={_preview(original_text)!r}"
        )
        prompt = build_prompt(category, original_text, handle)

        try:
            raw = await self.client.complete(model or self.model, prompt)
        except Exception as e:
            raise GenerationError(f"{type(e).__name__}: {e}") from e
        raw = raw.strip()
        logger.debug(f"Generated variation: {_preview(raw)!r}")

        if raw.startswith(TRIPLE_QUOTE):
            raise MalformedResponseError(
                f'response for field {field_name!r} starts with triple quotes (""")'
            )

        cleaned = clean_variation(raw)
        if cleaned != raw:
            logger.debug(f"Cleaned variation: {_preview(cleaned)!r}")
        return cleaned
