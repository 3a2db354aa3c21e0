"""Tests for locale negotiation and labels."""

import pytest

from continuum.core.i18n import (
    LOCALES,
    is_supported,
    negotiate_locale,
    split_locale,
    text_direction,
    translate,
)


def test_supported_locales() -> None:
    assert LOCALES == ("en", "es", "fr", "zh", "ru", "ar")
    assert is_supported("fr")
    assert not is_supported("de")


def test_arabic_is_right_to_left() -> None:
    assert text_direction("ar") == "rtl"
    assert text_direction("en") == "ltr"


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, "en"),
        ("", "en"),
        ("fr-FR,fr;q=0.9,en;q=0.8", "fr"),
        ("de-DE,ru;q=0.5,es;q=0.7", "es"),
        ("de,it", "en"),
        ("zh-CN;q=0,ar", "ar"),
    ],
)
def test_negotiate_locale(header: str | None, expected: str) -> None:
    assert negotiate_locale(header) == expected


def test_translate_falls_back_to_english_then_key() -> None:
    assert translate("fr", "nav_home") == "Accueil"
    assert translate("fr", "blog_empty") == translate("en", "blog_empty")
    assert translate("en", "no_such_label") == "no_such_label"


def test_split_locale() -> None:
    assert split_locale("/es/blog/post") == ("es", "/blog/post")
    assert split_locale("/ar") == ("ar", "/")
    assert split_locale("/api/blog") == (None, "/api/blog")
