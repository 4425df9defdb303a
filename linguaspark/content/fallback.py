"""
FallbackContentProvider - backup game content for when generation fails.

Templates are loaded once at construction and never change afterwards.
Every lookup hands out a fresh copy, so callers cannot alter the table.
"""

from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Mapping

from loguru import logger

from linguaspark.content.models import (
    GameContent,
    GameContentMetadata,
    GameContentOptions,
)
from linguaspark.content.templates import (
    FALLBACK_TEMPLATES,
    GAME_TYPE_ALIASES,
    LANGUAGE_CODES,
)


def language_code(language: str) -> str:
    """Map a language name or code onto its two-letter code."""
    normalized = language.strip().lower()
    return LANGUAGE_CODES.get(normalized, normalized)


def language_pair(language: str, target_language: str) -> str:
    return f"{language_code(language)}-{language_code(target_language)}"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class FallbackContentProvider:
    """
    Lookup table of pre-authored rounds.

    Usage:
        provider = FallbackContentProvider()
        content = provider.get_fallback_content(options, reason="QUALITY_ERROR")
        if content is None:
            raise original_error
    """

    def __init__(
        self,
        templates: Mapping[str, Mapping[str, Mapping[str, Mapping[str, Any]]]] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._templates = _freeze(templates if templates is not None else FALLBACK_TEMPLATES)
        self._clock = clock

    def _find_template(
        self, game_type: str, difficulty: str, pair: str
    ) -> Mapping[str, Any] | None:
        game_type = GAME_TYPE_ALIASES.get(game_type, game_type)
        game_template = self._templates.get(game_type)
        if game_template is None:
            logger.warning(f"No fallback template for game type: {game_type}")
            return None

        difficulty_template = game_template.get(difficulty)
        if difficulty_template is None:
            logger.warning(
                f"No fallback template for difficulty: {difficulty} in game: {game_type}"
            )
            return None

        template = difficulty_template.get(pair)
        if template is None:
            logger.warning(
                f"No fallback template for language pair: {pair} in game: {game_type}"
            )
        return template

    def get_fallback_content(
        self,
        options: GameContentOptions,
        reason: str = "API_FAILURE",
    ) -> GameContent | None:
        """
        Get backup content for the exact (game type, difficulty, language pair).

        Returns None when nothing is authored for that combination; callers
        must then surface the original error.
        """
        pair = language_pair(options.language, options.target_language)
        template = self._find_template(options.game_type, options.difficulty, pair)
        if template is None:
            return None

        return GameContent(
            type=options.game_type,
            difficulty=options.difficulty,
            language=options.language,
            target_language=options.target_language,
            rounds=_thaw(template["rounds"]),
            instructions=template.get("instructions"),
            metadata=GameContentMetadata(
                is_fallback=True,
                generated_at=self._clock(),
                reason=reason,
            ),
        )

    def has_fallback_content(self, options: GameContentOptions) -> bool:
        """Check if fallback content is available for given options."""
        game_type = GAME_TYPE_ALIASES.get(options.game_type, options.game_type)
        pair = language_pair(options.language, options.target_language)
        return pair in self._templates.get(game_type, {}).get(options.difficulty, {})

    def get_available_language_pairs(self, game_type: str, difficulty: str) -> list[str]:
        game_type = GAME_TYPE_ALIASES.get(game_type, game_type)
        return list(self._templates.get(game_type, {}).get(difficulty, {}))

    def get_available_difficulties(self, game_type: str) -> list[str]:
        game_type = GAME_TYPE_ALIASES.get(game_type, game_type)
        return list(self._templates.get(game_type, {}))

    def get_supported_game_types(self) -> list[str]:
        return list(self._templates)

    def get_statistics(self) -> dict[str, Any]:
        """Summarize which combinations have backup content."""
        combinations = [
            {"game_type": game_type, "difficulty": difficulty, "language_pair": pair}
            for game_type, difficulties in self._templates.items()
            for difficulty, pairs in difficulties.items()
            for pair in pairs
        ]
        return {
            "total_game_types": len(self._templates),
            "total_language_pairs": len(combinations),
            "supported_combinations": combinations,
        }
