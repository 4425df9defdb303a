"""
RequestOptimizer - trims prompts and clamps generation parameters before
they reach the API, which also makes cache keys converge.
"""

import re
from dataclasses import dataclass
from typing import Any, Literal

from loguru import logger

from linguaspark.content.models import (
    GameContentOptions,
    ImageGenerationOptions,
    TextGenerationOptions,
)

RequestType = Literal["text", "image", "game-content"]

TEXT_FILLER_PHRASES: tuple[str, ...] = (
    "please",
    "can you",
    "could you",
    "i want you to",
    "i need you to",
    "make sure to",
    "be sure to",
    "you should",
    "you must",
)

GAME_FILLER_PHRASES: tuple[str, ...] = (
    "create a game",
    "generate content for",
    "make a",
    "build a",
    "design a",
)

IMAGE_STYLE_KEYWORDS: tuple[str, ...] = ("icon", "simple", "clean", "minimalist", "flat")

IMAGE_VERBOSE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(very|extremely|really|quite|rather|pretty|fairly)\s+", re.IGNORECASE),
    re.compile(
        r"\b(high quality|high resolution|detailed|realistic|photorealistic)\s*",
        re.IGNORECASE,
    ),
    re.compile(r"\b(professional|premium|luxury|expensive)\s*", re.IGNORECASE),
)

MAX_PROMPT_LENGTH: dict[str, int] = {"text": 400, "image": 120, "game-content": 600}

_WHITESPACE = re.compile(r"\s+")


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


@dataclass
class OptimizerStats:
    prompt_optimizations: int = 0
    parameter_optimizations: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt_optimizations": self.prompt_optimizations,
            "parameter_optimizations": self.parameter_optimizations,
        }


class RequestOptimizer:
    """Prompt and parameter normalization per request type."""

    def __init__(self, debug: bool = False):
        self._debug = debug
        self._stats = OptimizerStats()

    def optimize_prompt(self, prompt: str, request_type: RequestType) -> str:
        original = prompt
        optimized = _collapse(prompt)

        if request_type == "text":
            optimized = self._strip_phrases(optimized, TEXT_FILLER_PHRASES)
        elif request_type == "game-content":
            optimized = self._strip_phrases(optimized, GAME_FILLER_PHRASES)
        elif request_type == "image":
            lowered = optimized.lower()
            if len(optimized) < 80 and not any(k in lowered for k in IMAGE_STYLE_KEYWORDS):
                optimized += ", simple icon, clean style"
            for pattern in IMAGE_VERBOSE_PATTERNS:
                optimized = _collapse(pattern.sub("", optimized))

        optimized = _truncate(optimized, MAX_PROMPT_LENGTH[request_type])

        if optimized != original:
            self._stats.prompt_optimizations += 1
            self._log(
                f"Optimized {request_type} prompt: {len(original)} -> {len(optimized)} chars"
            )
        return optimized

    @staticmethod
    def _strip_phrases(text: str, phrases: tuple[str, ...]) -> str:
        for phrase in phrases:
            text = re.sub(rf"\b{re.escape(phrase)}\b", "", text, flags=re.IGNORECASE)
        return _collapse(text)

    def optimize_parameters(self, options, request_type: RequestType):
        if request_type == "text":
            return self.optimize_text_options(options)
        if request_type == "image":
            return self.optimize_image_options(options)
        return self.optimize_game_options(options)

    def optimize_text_options(self, options: TextGenerationOptions) -> TextGenerationOptions:
        updates: dict[str, Any] = {}
        if options.temperature is None:
            updates["temperature"] = 0.7
        elif options.temperature > 0.9:
            updates["temperature"] = 0.9

        if options.max_tokens is None:
            updates["max_tokens"] = 800
        elif options.max_tokens > 2000:
            updates["max_tokens"] = 2000

        return self._apply(options, updates, "text")

    def optimize_image_options(
        self, options: ImageGenerationOptions
    ) -> ImageGenerationOptions:
        updates: dict[str, Any] = {}
        width, height = options.width, options.height
        if width is None and height is None:
            width = height = 256
            updates.update(width=256, height=256)
        if width is not None and width > 512:
            updates["width"] = 512
        if height is not None and height > 512:
            updates["height"] = 512
        if options.enhance is None:
            updates["enhance"] = False

        return self._apply(options, updates, "image")

    def optimize_game_options(self, options: GameContentOptions) -> GameContentOptions:
        updates: dict[str, Any] = {}
        if not options.rounds or options.rounds > 10:
            updates["rounds"] = 5
        return self._apply(options, updates, "game-content")

    def _apply(self, options, updates: dict[str, Any], request_type: str):
        if not updates:
            return options
        self._stats.parameter_optimizations += 1
        self._log(f"Optimized {request_type} parameters: {sorted(updates)}")
        return options.model_copy(update=updates)

    def get_stats(self) -> OptimizerStats:
        return self._stats

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[RequestOptimizer] {message}")
