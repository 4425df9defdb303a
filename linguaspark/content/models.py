"""
Request and response models for the content generation API.

Field names are snake_case; aliases match the backend's camelCase JSON.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["beginner", "intermediate", "advanced"]


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire, dropping unset values."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TextGenerationOptions(ApiModel):
    temperature: float | None = None
    max_tokens: int | None = Field(default=None, alias="maxTokens")
    seed: int | None = None


class ImageGenerationOptions(ApiModel):
    width: int | None = None
    height: int | None = None
    seed: int | None = None
    enhance: bool | None = None


class GameContentOptions(ApiModel):
    game_type: str = Field(alias="gameType")
    difficulty: Difficulty = "intermediate"
    language: str
    target_language: str = Field(alias="targetLanguage")
    rounds: int | None = None
    topic: str | None = None


class TokenUsage(ApiModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class TextResponse(ApiModel):
    content: str
    model: str
    usage: TokenUsage | None = None


class ImageResponse(ApiModel):
    image_url: str = Field(alias="imageUrl")
    model: str
    parameters: ImageGenerationOptions = Field(default_factory=ImageGenerationOptions)


class GameContentMetadata(ApiModel):
    """Marks substituted content so the UI can show a backup-content notice."""

    is_fallback: bool = Field(default=False, alias="isFallback")
    generated_at: datetime = Field(default_factory=datetime.now, alias="generatedAt")
    reason: str | None = None


class GameContent(ApiModel):
    type: str
    difficulty: str
    language: str
    target_language: str = Field(alias="targetLanguage")
    rounds: list[dict[str, Any]] = Field(default_factory=list)
    instructions: str | None = None
    metadata: GameContentMetadata | None = None

    @property
    def is_fallback(self) -> bool:
        return self.metadata is not None and self.metadata.is_fallback
