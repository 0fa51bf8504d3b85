"""Unit tests for title normalization."""

import pytest

from src.catalog.name_normalizer import normalize_name


class TestNormalizeName:
    @staticmethod
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_input(value) -> None:
        assert normalize_name(value) == ""

    @staticmethod
    def test_lowercase_and_trim() -> None:
        assert normalize_name("  Foo   Bar  ") == "foo bar"

    @staticmethod
    def test_punctuation_removed_hyphen_kept() -> None:
        assert normalize_name("Re:Zero - Foo-Bar!") == "rezero - foo-bar"

    @staticmethod
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("The Foo", "foo"), ("A Tale", "tale"), ("An Idol", "idol"), ("The   Foo", "foo")],
    )
    def test_leading_article(value, expected) -> None:
        assert normalize_name(value) == expected

    @staticmethod
    def test_article_needs_word_boundary() -> None:
        assert normalize_name("Theory") == "theory"

    @staticmethod
    @pytest.mark.parametrize(
        "value",
        ["Foo Episode 3", "Foo ep3", "Foo Series", "Foo Season 2", "Foo S", "Foo season"],
    )
    def test_trailing_marker(value) -> None:
        assert normalize_name(value) == "foo"

    @staticmethod
    def test_trailing_number_alone_kept() -> None:
        assert normalize_name("Foo 2") == "foo 2"

    @staticmethod
    def test_article_and_marker_combined() -> None:
        assert normalize_name("The Foo: Season 2") == "foo"

    @staticmethod
    def test_unicode_word_characters_kept() -> None:
        assert normalize_name("Café Ölé") == "café ölé"

    @staticmethod
    def test_only_symbols() -> None:
        assert normalize_name("!!! ???") == ""

    @staticmethod
    def test_idempotent() -> None:
        once = normalize_name("The Foo: Season 2 (Uncut)")
        assert normalize_name(once) == once
