from __future__ import annotations

import logging

"""Cleanup of raw model responses.

Rules run in a fixed order, each at most once, each checked against the
string as left by the previous rule:

1. leading  \"\"\"            2. trailing \"\"\"
3. ``` fenced block (drop opening fence line, cut at last fence)
4. one leading " or `       5. one trailing " or `
6. leading  <!-- ... -->     7. trailing <!-- ... -->
8. trailing newlines
"""

logger = logging.getLogger(__name__)

TRIPLE_QUOTE = '"""'
FENCE = "```"
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
WRAPPING_QUOTES = ('"', "`")


def _strip_fence(text: str) -> str:
    end = text.rfind(FENCE)
    # 開始フェンス行 (```html 等の言語タグ含む) を除去
    body = text[text.find("\n") + 1:]
    if end > 0:
        cut = body.rfind(FENCE)
        return body[:max(cut, 0)].strip()
    return body.strip()


def clean_variation(variation: str) -> str:
    """Return the sanitized variation. Never raises."""
    cleaned = variation
    was_cleaned = False

    if cleaned.startswith(TRIPLE_QUOTE):
        logger.warning("Generated variation starts with triple quotes - removing them")
        cleaned = cleaned[3:]
        was_cleaned = True

    if cleaned.endswith(TRIPLE_QUOTE):
        logger.warning("Generated variation ends with triple quotes - removing them")
        cleaned = cleaned[:-3]
        was_cleaned = True

    if cleaned.startswith(FENCE):
        logger.warning("Generated variation starts with code block markers - removing them")
        cleaned = _strip_fence(cleaned)
        was_cleaned = True

    if cleaned.startswith(WRAPPING_QUOTES):
        logger.warning("Generated variation starts with quotes - removing them")
        cleaned = cleaned[1:]
        was_cleaned = True

    if cleaned.endswith(WRAPPING_QUOTES):
        logger.warning("Generated variation ends with quotes - removing them")
        cleaned = cleaned[:-1]
        was_cleaned = True

    if cleaned.startswith(COMMENT_OPEN) and COMMENT_CLOSE in cleaned:
        logger.warning("Generated variation starts with HTML comment - removing it")
        cleaned = cleaned[cleaned.find(COMMENT_CLOSE) + len(COMMENT_CLOSE):].strip()
        was_cleaned = True

    if cleaned.endswith(COMMENT_CLOSE) and COMMENT_OPEN in cleaned:
        logger.warning("Generated variation ends with HTML comment - removing it")
        cleaned = cleaned[:cleaned.rfind(COMMENT_OPEN)].strip()
        was_cleaned = True

    if cleaned.endswith("\n"):
        logger.warning("Generated variation ends with newlines - removing them")
        cleaned = cleaned.strip()
        was_cleaned = True

    if was_cleaned:
        logger.debug(f"Variation sanitized: {len(variation)} -> {len(cleaned)} chars")
    return cleaned
