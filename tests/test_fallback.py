"""Tests for fallback game content."""

from __future__ import annotations

from datetime import datetime

from linguaspark.content.fallback import FallbackContentProvider, language_pair
from linguaspark.content.models import GameContentOptions


def _options(**overrides: str) -> GameContentOptions:
    values = {
        "game_type": "conjugation-coach",
        "difficulty": "beginner",
        "language": "english",
        "target_language": "spanish",
    }
    values.update(overrides)
    return GameContentOptions(**values)


def test_language_names_and_codes_resolve_to_same_pair() -> None:
    assert language_pair("English", "spanish") == "en-es"
    assert language_pair("en", "es") == "en-es"


def test_returns_marked_content_for_known_combination() -> None:
    stamp = datetime(2024, 5, 1, 9, 30)
    provider = FallbackContentProvider(clock=lambda: stamp)

    content = provider.get_fallback_content(_options(), reason="QUALITY_ERROR")

    assert content is not None
    assert content.is_fallback is True
    assert content.metadata.reason == "QUALITY_ERROR"
    assert content.metadata.generated_at == stamp
    assert content.type == "conjugation-coach"
    assert len(content.rounds) == 5
    assert content.rounds[0]["correct"] == "soy"


def test_unknown_combination_returns_none() -> None:
    provider = FallbackContentProvider()
    assert provider.get_fallback_content(_options(difficulty="advanced")) is None
    assert provider.get_fallback_content(_options(target_language="japanese")) is None
    assert provider.get_fallback_content(_options(game_type="image-instinct")) is None


def test_returned_content_cannot_alter_templates() -> None:
    provider = FallbackContentProvider()
    first = provider.get_fallback_content(_options())
    first.rounds[0]["correct"] = "changed"
    first.rounds[0]["options"].append("extra")

    second = provider.get_fallback_content(_options())
    assert second.rounds[0]["correct"] == "soy"
    assert second.rounds[0]["options"] == ["soy", "eres", "es", "somos"]


def test_custom_templates_are_copied_at_construction() -> None:
    templates = {
        "word-drop-dash": {
            "beginner": {"en-fr": {"rounds": [{"word": "chat"}], "instructions": "Go"}}
        }
    }
    provider = FallbackContentProvider(templates=templates)
    templates["word-drop-dash"]["beginner"]["en-fr"]["rounds"].append({"word": "chien"})

    content = provider.get_fallback_content(
        _options(game_type="word-drop-dash", target_language="fr")
    )
    assert content.rounds == [{"word": "chat"}]


def test_game_type_alias() -> None:
    provider = FallbackContentProvider()
    options = _options(game_type="translation-match-up")
    assert provider.has_fallback_content(options)
    assert provider.get_fallback_content(options).type == "translation-match-up"


def test_catalogue_queries() -> None:
    provider = FallbackContentProvider()
    assert "conjugation-coach" in provider.get_supported_game_types()
    assert provider.get_available_difficulties("translation-matchup") == [
        "beginner",
        "intermediate",
    ]
    assert set(provider.get_available_language_pairs("translation-matchup", "beginner")) == {
        "en-es",
        "en-fr",
    }
    stats = provider.get_statistics()
    assert stats["total_game_types"] == 4
    assert stats["total_language_pairs"] == 6
