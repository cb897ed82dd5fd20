from ...utils.text import has_any_word
from ..models import Intent


SQUARE_WORDS = ["square", "sqaure", "1:1"]
BACKGROUND_WORDS = ["rbg"]
KEYWORD_WORDS = ["sticker"]


def parse_caption(caption: str | None, requires_keyword: bool = False) -> Intent:
    """Derive the caption flags.

    Matching is whole-word and case-insensitive, so "squares" or "xrbg" do not
    count. An empty caption yields no flags.
    """
    text = caption or ""
    return Intent(
        wants_square=has_any_word(text, SQUARE_WORDS),
        wants_background_removal=has_any_word(text, BACKGROUND_WORDS),
        requires_keyword=requires_keyword,
        has_keyword=has_any_word(text, KEYWORD_WORDS),
    )
