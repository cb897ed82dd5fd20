import pytest

from src.pipeline.steps.parse_caption import parse_caption


@pytest.mark.parametrize("caption", ["square", "SQUARE please", "make it 1:1", "sqaure", "Square, rbg"])
def test_square_words_match(caption: str) -> None:
    assert parse_caption(caption).wants_square is True


@pytest.mark.parametrize("caption", ["squares", "squared off", "foursquare", "11:1", "1:10"])
def test_square_inside_other_words_does_not_match(caption: str) -> None:
    assert parse_caption(caption).wants_square is False


def test_background_removal_flag() -> None:
    assert parse_caption("RBG").wants_background_removal is True
    assert parse_caption("rbgs").wants_background_removal is False
    assert parse_caption("xrbg").wants_background_removal is False


def test_keyword_flag() -> None:
    intent = parse_caption("Sticker square", requires_keyword=True)
    assert intent.has_keyword is True
    assert intent.gated_out is False

    intent = parse_caption("stickers", requires_keyword=True)
    assert intent.has_keyword is False
    assert intent.gated_out is True


@pytest.mark.parametrize("caption", ["", None])
def test_empty_caption_yields_no_flags(caption) -> None:
    intent = parse_caption(caption)
    assert not intent.wants_square
    assert not intent.wants_background_removal
    assert not intent.has_keyword
    assert not intent.gated_out
