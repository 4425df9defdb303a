"""
PollinationsService - resilient access to the content generation endpoints.

Every generation call takes the same path:

    dedupe(key) -> cache.get_or_generate(key) -> retry_with_backoff -> ApiClient

Game content additionally falls back to pre-authored rounds once retries
are exhausted. Each failure seen along the way is recorded in the
ErrorMonitor with its final resolution.
"""

import asyncio
import random
from datetime import timedelta
from typing import Any, Awaitable, Callable

from loguru import logger

from linguaspark.content.fallback import FallbackContentProvider
from linguaspark.content.models import (
    GameContent,
    GameContentOptions,
    ImageGenerationOptions,
    ImageResponse,
    TextGenerationOptions,
    TextResponse,
)
from linguaspark.content.optimizer import RequestOptimizer
from linguaspark.monitoring.error_monitor import ErrorMonitor
from linguaspark.services.cache import RequestCache
from linguaspark.services.client import ApiClient
from linguaspark.services.deduplicator import RequestDeduplicator
from linguaspark.services.errors import ClassifiedError, ErrorContext, ErrorKind
from linguaspark.services.retry import (
    CONTENT_RETRY_POLICY,
    IMAGE_RETRY_POLICY,
    RetryPolicy,
    retry_with_backoff,
)

TEXT_ENDPOINT = "/pollinations/text"
IMAGE_ENDPOINT = "/pollinations/image"
GAME_CONTENT_ENDPOINT = "/pollinations/game-content"
STATUS_ENDPOINT = "/pollinations/status"

# Fallback content cannot fix these; the user has to act
NO_FALLBACK_KINDS = frozenset({ErrorKind.AUTHENTICATION, ErrorKind.QUOTA_EXCEEDED})


class PollinationsService:
    """
    Feature-facing API for text, image and game content generation.

    Usage:
        service = PollinationsService(client, cache, dedup, monitor, fallback)
        content = await service.generate_game_content(
            GameContentOptions(
                game_type="conjugation-coach",
                difficulty="beginner",
                language="english",
                target_language="spanish",
            )
        )
        if content.is_fallback:
            show_backup_notice(content.metadata.reason)
    """

    def __init__(
        self,
        client: ApiClient,
        cache: RequestCache,
        deduplicator: RequestDeduplicator,
        monitor: ErrorMonitor,
        fallback: FallbackContentProvider,
        optimizer: RequestOptimizer | None = None,
        *,
        content_policy: RetryPolicy = CONTENT_RETRY_POLICY,
        image_policy: RetryPolicy = IMAGE_RETRY_POLICY,
        text_ttl: timedelta = timedelta(minutes=30),
        image_ttl: timedelta = timedelta(hours=24),
        game_content_ttl: timedelta = timedelta(minutes=10),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        random_fn: Callable[[], float] = random.random,
    ):
        self._client = client
        self._cache = cache
        self._deduplicator = deduplicator
        self._monitor = monitor
        self._fallback = fallback
        self._optimizer = optimizer
        self._content_policy = content_policy
        self._image_policy = image_policy
        self._text_ttl = text_ttl
        self._image_ttl = image_ttl
        self._game_content_ttl = game_content_ttl
        self._sleep = sleep
        self._random_fn = random_fn

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def generate_text(
        self,
        prompt: str,
        options: TextGenerationOptions | None = None,
    ) -> TextResponse:
        options = options or TextGenerationOptions()
        if self._optimizer is not None:
            prompt = self._optimizer.optimize_prompt(prompt, "text")
            options = self._optimizer.optimize_parameters(options, "text")

        context = ErrorContext(operation="generate_text", endpoint=TEXT_ENDPOINT)

        async def fetch() -> TextResponse:
            data = await self._client.post(
                TEXT_ENDPOINT, {"prompt": prompt, "options": options.to_payload()}
            )
            return TextResponse.model_validate(data)

        key = self._cache.generate_key("text", prompt, options)
        return await self._run(
            key, fetch, self._content_policy, self._text_ttl, context
        )

    async def generate_image(
        self,
        prompt: str,
        options: ImageGenerationOptions | None = None,
    ) -> ImageResponse:
        options = options or ImageGenerationOptions()
        if self._optimizer is not None:
            prompt = self._optimizer.optimize_prompt(prompt, "image")
            options = self._optimizer.optimize_parameters(options, "image")

        context = ErrorContext(operation="generate_image", endpoint=IMAGE_ENDPOINT)

        async def fetch() -> ImageResponse:
            data = await self._client.post(
                IMAGE_ENDPOINT, {"prompt": prompt, "options": options.to_payload()}
            )
            return ImageResponse.model_validate(data)

        key = self._cache.generate_key("image", prompt, options)
        return await self._run(
            key, fetch, self._image_policy, self._image_ttl, context
        )

    async def generate_game_content(self, options: GameContentOptions) -> GameContent:
        """
        Generate rounds for a game.

        Once retries are exhausted the error is replaced by fallback content
        for the same game type, difficulty and language pair when such
        content exists. Fallback content is returned but never cached.

        Raises:
            ClassifiedError: Authentication or quota failures, or any failure
                with no fallback content for the requested combination
        """
        if self._optimizer is not None:
            options = self._optimizer.optimize_parameters(options, "game-content")

        context = ErrorContext(
            operation="generate_game_content",
            endpoint=GAME_CONTENT_ENDPOINT,
            game_type=options.game_type,
        )

        async def fetch() -> GameContent:
            data = await self._client.post(GAME_CONTENT_ENDPOINT, options.to_payload())
            return self._to_game_content(data, options)

        key = self._cache.generate_key("game-content", "", options)

        async def generate_or_fall_back() -> GameContent:
            try:
                result = await self._cache.get_or_generate(
                    key,
                    lambda: self._retry(fetch, self._content_policy, context),
                    self._game_content_ttl,
                )
                return result.data
            except ClassifiedError as error:
                content = self._recover(error, options)
                if content is None:
                    raise
                return content

        return await self._deduplicator.dedupe(key, generate_or_fall_back)

    async def check_api_status(self) -> bool:
        """True only when the backend reports itself available. Never raises."""
        try:
            data = await self._client.get(STATUS_ENDPOINT)
        except Exception as e:
            logger.warning(f"API status check failed: {e}")
            return False
        return isinstance(data, dict) and data.get("available") is True

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _run(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        policy: RetryPolicy,
        ttl: timedelta,
        context: ErrorContext,
    ) -> Any:
        async def generate() -> Any:
            try:
                result = await self._cache.get_or_generate(
                    key, lambda: self._retry(fetch, policy, context), ttl
                )
            except ClassifiedError as error:
                self._record(error, "surfaced")
                raise
            return result.data

        return await self._deduplicator.dedupe(key, generate)

    async def _retry(
        self,
        fetch: Callable[[], Awaitable[Any]],
        policy: RetryPolicy,
        context: ErrorContext,
    ) -> Any:
        return await retry_with_backoff(
            fetch,
            policy,
            context=context,
            on_retry=self._on_retry,
            sleep=self._sleep,
            random_fn=self._random_fn,
        )

    def _on_retry(self, error: ClassifiedError, attempt: int, delay: float) -> None:
        self._record(error, "retried", {"attempt": attempt, "delay": round(delay, 3)})

    def _recover(
        self, error: ClassifiedError, options: GameContentOptions
    ) -> GameContent | None:
        if error.kind in NO_FALLBACK_KINDS:
            self._record(error, "surfaced")
            return None

        content = self._fallback.get_fallback_content(
            options, reason=f"{error.kind.value}_ERROR"
        )
        if content is None:
            self._record(error, "surfaced")
            return None

        self._record(error, "fallback")
        logger.warning(
            f"Serving fallback content for {options.game_type} "
            f"({options.difficulty}, {options.language}->{options.target_language}) "
            f"after {error.kind.value}"
        )
        return content

    def _record(
        self,
        error: ClassifiedError,
        resolution: str,
        meta: dict[str, Any] | None = None,
    ) -> None:
        error_id = self._monitor.log_error(error, meta)
        self._monitor.resolve_error(error_id, resolution)

    @staticmethod
    def _to_game_content(data: Any, options: GameContentOptions) -> GameContent:
        """Fill fields the backend leaves out from the request options."""
        if not isinstance(data, dict):
            data = {"rounds": data}
        payload = {
            "type": options.game_type,
            "difficulty": options.difficulty,
            "language": options.language,
            "targetLanguage": options.target_language,
            **data,
        }
        return GameContent.model_validate(payload)
