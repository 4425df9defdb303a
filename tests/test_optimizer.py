"""Tests for prompt and parameter optimization."""

from __future__ import annotations

from linguaspark.content.models import (
    GameContentOptions,
    ImageGenerationOptions,
    TextGenerationOptions,
)
from linguaspark.content.optimizer import RequestOptimizer


def test_text_prompt_drops_filler_and_whitespace() -> None:
    optimizer = RequestOptimizer()
    result = optimizer.optimize_prompt("Please   translate  this sentence", "text")
    assert result == "translate this sentence"


def test_text_prompt_is_capped() -> None:
    result = RequestOptimizer().optimize_prompt("word " * 200, "text")
    assert len(result) == 400
    assert result.endswith("...")


def test_short_image_prompt_gets_style_hint() -> None:
    result = RequestOptimizer().optimize_prompt("a red apple", "image")
    assert result == "a red apple, simple icon, clean style"


def test_image_prompt_with_style_keeps_it() -> None:
    result = RequestOptimizer().optimize_prompt("flat icon of a cat", "image")
    assert result == "flat icon of a cat"


def test_image_prompt_strips_verbose_adjectives() -> None:
    result = RequestOptimizer().optimize_prompt("a very detailed simple house", "image")
    assert result == "a simple house"


def test_image_prompt_is_capped() -> None:
    result = RequestOptimizer().optimize_prompt("simple " + "tree " * 50, "image")
    assert len(result) == 120


def test_game_prompt_drops_filler() -> None:
    result = RequestOptimizer().optimize_prompt("Create a game about food", "game-content")
    assert result == "about food"


def test_text_parameters_default_and_cap() -> None:
    optimizer = RequestOptimizer()
    defaults = optimizer.optimize_parameters(TextGenerationOptions(), "text")
    assert defaults.temperature == 0.7
    assert defaults.max_tokens == 800

    capped = optimizer.optimize_parameters(
        TextGenerationOptions(temperature=1.5, max_tokens=5000, seed=3), "text"
    )
    assert capped.temperature == 0.9
    assert capped.max_tokens == 2000
    assert capped.seed == 3


def test_image_parameters_default_and_cap() -> None:
    optimizer = RequestOptimizer()
    defaults = optimizer.optimize_parameters(ImageGenerationOptions(), "image")
    assert (defaults.width, defaults.height, defaults.enhance) == (256, 256, False)

    capped = optimizer.optimize_parameters(
        ImageGenerationOptions(width=1024, height=300, enhance=True), "image"
    )
    assert (capped.width, capped.height, capped.enhance) == (512, 300, True)


def test_game_rounds_default_and_cap() -> None:
    optimizer = RequestOptimizer()
    base = {
        "game_type": "audio-jumble",
        "language": "english",
        "target_language": "spanish",
    }
    assert optimizer.optimize_parameters(GameContentOptions(**base), "game-content").rounds == 5
    assert (
        optimizer.optimize_parameters(GameContentOptions(**base, rounds=20), "game-content").rounds
        == 5
    )
    assert (
        optimizer.optimize_parameters(GameContentOptions(**base, rounds=8), "game-content").rounds
        == 8
    )


def test_input_options_are_not_mutated() -> None:
    options = TextGenerationOptions(temperature=1.5)
    RequestOptimizer().optimize_parameters(options, "text")
    assert options.temperature == 1.5


def test_stats_count_changes_only() -> None:
    optimizer = RequestOptimizer()
    optimizer.optimize_prompt("already tidy", "text")
    optimizer.optimize_prompt("please be brief", "text")
    assert optimizer.get_stats().prompt_optimizations == 1
