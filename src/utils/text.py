import re


def clean_text(text: str) -> str:
    cleaned = re.sub(r"\s+", " ", text or "").strip()
    return cleaned


def has_any_word(text: str, words: list[str]) -> bool:
    if not text:
        return False
    alternatives = "|".join(re.escape(word) for word in words)
    return re.search(rf"\b(?:{alternatives})\b", text, re.IGNORECASE) is not None
