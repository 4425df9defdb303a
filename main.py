"""
LinguaSpark content client entry point.

Checks backend availability and generates one round of game content,
printing whether backup content had to be used.
"""

import asyncio
import sys

from loguru import logger

from linguaspark import create_container, load_settings
from linguaspark.content import GameContentOptions
from linguaspark.services import ClassifiedError


async def main() -> None:
    settings = load_settings()

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.debug else settings.log_level)

    logger.info(f"Starting LinguaSpark client against {settings.api_base_url}...")

    async with create_container(settings) as container:
        available = await container.pollinations.check_api_status()
        logger.info(f"Content API available: {available}")

        options = GameContentOptions(
            game_type="conjugation-coach",
            difficulty="beginner",
            language="english",
            target_language="spanish",
        )
        try:
            content = await container.pollinations.generate_game_content(options)
        except ClassifiedError as e:
            logger.error(f"Game content unavailable: {e.user_friendly_message()}")
            for suggestion in e.contextual_suggestions():
                logger.info(f"  - {suggestion}")
        else:
            source = "fallback" if content.is_fallback else "API"
            logger.info(f"Got {len(content.rounds)} rounds from {source}")

        metrics = container.monitor.get_metrics()
        logger.info(f"Error metrics: {metrics.to_dict()}")
        logger.info(f"Cache stats: {container.cache.get_stats().to_dict()}")

    logger.info("LinguaSpark client stopped")


if __name__ == "__main__":
    asyncio.run(main())
