"""
Content generation - models, fallback rounds and the Pollinations facade.
"""

from linguaspark.content.models import (
    GameContent,
    GameContentMetadata,
    GameContentOptions,
    ImageGenerationOptions,
    ImageResponse,
    TextGenerationOptions,
    TextResponse,
)
from linguaspark.content.fallback import FallbackContentProvider
from linguaspark.content.optimizer import RequestOptimizer
from linguaspark.content.pollinations import PollinationsService

__all__ = [
    "GameContent",
    "GameContentMetadata",
    "GameContentOptions",
    "ImageGenerationOptions",
    "ImageResponse",
    "TextGenerationOptions",
    "TextResponse",
    "FallbackContentProvider",
    "RequestOptimizer",
    "PollinationsService",
]
