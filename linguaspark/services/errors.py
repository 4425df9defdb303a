"""
Service layer exceptions and the error taxonomy.

Failures are captured once at the HTTP boundary as a typed ``Failure``
(``HttpFailure`` | ``NetworkFailure`` | ``GenericFailure``) and later mapped
to a ``ClassifiedError`` by the classifier.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Union


class ErrorKind(str, Enum):
    """Error taxonomy shared by the retrier, fallback and monitor."""

    NETWORK = "NETWORK"
    API = "API"
    VALIDATION = "VALIDATION"
    QUALITY = "QUALITY"
    TIMEOUT = "TIMEOUT"
    RATE_LIMIT = "RATE_LIMIT"
    AUTHENTICATION = "AUTHENTICATION"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class ErrorTemplate:
    """User messaging and retry policy for one error kind."""

    user_message: str
    suggestions: tuple[str, ...]
    retryable: bool
    base_delay: float = 0.0  # seconds


ERROR_TEMPLATES: dict[ErrorKind, ErrorTemplate] = {
    ErrorKind.NETWORK: ErrorTemplate(
        user_message=(
            "We're having trouble connecting to our servers. "
            "Please check your internet connection."
        ),
        suggestions=(
            "Check your internet connection",
            "Try refreshing the page",
            "Wait a moment and try again",
        ),
        retryable=True,
        base_delay=1.0,
    ),
    ErrorKind.API: ErrorTemplate(
        user_message="Our content generation service is temporarily unavailable.",
        suggestions=(
            "Try again in a few moments",
            "Use a different game type if available",
            "Contact support if the problem persists",
        ),
        retryable=True,
        base_delay=2.0,
    ),
    ErrorKind.VALIDATION: ErrorTemplate(
        user_message="The request contains invalid parameters.",
        suggestions=(
            "Check your input parameters",
            "Try with different settings",
            "Contact support if the issue persists",
        ),
        retryable=True,
        base_delay=0.5,
    ),
    ErrorKind.QUALITY: ErrorTemplate(
        user_message=(
            "The generated content didn't meet our quality standards. "
            "We're trying again."
        ),
        suggestions=(
            "This usually resolves automatically",
            "Try a different difficulty level",
            "Try a different topic if you specified one",
        ),
        retryable=True,
        base_delay=1.0,
    ),
    ErrorKind.TIMEOUT: ErrorTemplate(
        user_message="The request is taking longer than expected.",
        suggestions=(
            "Try again with a simpler request",
            "Check your internet connection",
            "Our servers might be busy - try again shortly",
        ),
        retryable=True,
        base_delay=3.0,
    ),
    ErrorKind.RATE_LIMIT: ErrorTemplate(
        user_message="You've reached the rate limit. Please wait before trying again.",
        suggestions=(
            "Wait a few minutes before generating new content",
            "Play existing games while you wait",
            "Consider upgrading for higher limits",
        ),
        retryable=True,
        base_delay=60.0,
    ),
    ErrorKind.AUTHENTICATION: ErrorTemplate(
        user_message="There's an issue with your account authentication.",
        suggestions=(
            "Try signing out and signing back in",
            "Clear your browser cache and cookies",
            "Contact support if the problem continues",
        ),
        retryable=False,
    ),
    ErrorKind.QUOTA_EXCEEDED: ErrorTemplate(
        user_message="You've used up your content generation quota.",
        suggestions=(
            "Your quota will reset according to your plan",
            "Play existing games in the meantime",
            "Consider upgrading for unlimited access",
        ),
        retryable=False,
    ),
    ErrorKind.UNKNOWN: ErrorTemplate(
        user_message="Something unexpected happened. We're working to fix it.",
        suggestions=(
            "Try refreshing the page",
            "Wait a moment and try again",
            "Contact support if this keeps happening",
        ),
        retryable=True,
        base_delay=2.0,
    ),
}

# (immediate, short term, long term)
RECOVERY_ACTIONS: dict[ErrorKind, tuple[tuple[str, ...], ...]] = {
    ErrorKind.NETWORK: (
        ("Check internet connection", "Refresh the page"),
        ("Try again in a few minutes", "Try a different network"),
        ("Contact your internet provider if issues persist",),
    ),
    ErrorKind.AUTHENTICATION: (
        ("Sign out and sign back in",),
        ("Clear browser cache and cookies",),
        ("Contact support for account assistance",),
    ),
    ErrorKind.RATE_LIMIT: (
        ("Wait before trying again",),
        ("Play existing games while waiting",),
        ("Consider upgrading your account",),
    ),
    ErrorKind.QUOTA_EXCEEDED: (
        ("Use existing game content",),
        ("Wait for quota reset or add credits",),
        ("Upgrade to unlimited plan",),
    ),
    ErrorKind.API: (
        ("Try a different game type",),
        ("Wait for service restoration",),
        ("Report persistent issues to support",),
    ),
    ErrorKind.TIMEOUT: (
        ("Try with simpler settings",),
        ("Check internet speed",),
        ("Contact support if timeouts persist",),
    ),
    ErrorKind.QUALITY: (
        ("Try again with different parameters",),
        ("Use fallback content",),
        ("Report quality issues to help us improve",),
    ),
}

_DEFAULT_RECOVERY = (
    ("Refresh and try again",),
    ("Try different settings",),
    ("Contact support if needed",),
)

SEVERITY: dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "critical",
    ErrorKind.QUOTA_EXCEEDED: "critical",
    ErrorKind.API: "high",
    ErrorKind.RATE_LIMIT: "high",
    ErrorKind.TIMEOUT: "medium",
    ErrorKind.NETWORK: "medium",
}

CATEGORY: dict[ErrorKind, str] = {
    ErrorKind.AUTHENTICATION: "authentication",
    ErrorKind.RATE_LIMIT: "rate_limiting",
    ErrorKind.QUOTA_EXCEEDED: "rate_limiting",
    ErrorKind.NETWORK: "connectivity",
    ErrorKind.TIMEOUT: "connectivity",
    ErrorKind.API: "server_error",
    ErrorKind.QUALITY: "content_generation",
    ErrorKind.VALIDATION: "content_generation",
}


# Classification input, built once at the HTTP-call boundary.


@dataclass(frozen=True)
class HttpFailure:
    """The server answered with a non-success status."""

    status: int
    message: str = ""
    retry_after: float | None = None  # seconds


@dataclass(frozen=True)
class NetworkFailure:
    """No response at all: offline, DNS, refused connection."""

    message: str = ""


@dataclass(frozen=True)
class GenericFailure:
    """Anything else, described by an exception name and message."""

    message: str = ""
    name: str = ""


Failure = Union[HttpFailure, NetworkFailure, GenericFailure]


@dataclass(frozen=True)
class ErrorContext:
    """Where a failure happened."""

    operation: str | None = None
    endpoint: str | None = None
    game_type: str | None = None
    request_id: str | None = None


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, service_id: str | None = None):
        self.service_id = service_id
        super().__init__(message)


class RequestFailedError(ServiceError):
    """An HTTP call failed; ``failure`` describes how."""

    def __init__(self, failure: Failure, endpoint: str | None = None):
        self.failure = failure
        self.endpoint = endpoint
        message = failure.message or type(failure).__name__
        if isinstance(failure, HttpFailure):
            message = f"HTTP {failure.status}: {message}"
        super().__init__(message, service_id=endpoint)


class ClassifiedError(ServiceError):
    """A failure mapped onto the error taxonomy."""

    def __init__(
        self,
        kind: ErrorKind,
        raw_message: str,
        context: ErrorContext | None = None,
        retry_after: float | None = None,
        status_code: int | None = None,
        timestamp: datetime | None = None,
    ):
        template = ERROR_TEMPLATES[kind]
        self.kind = kind
        self.raw_message = raw_message
        self.user_message = template.user_message
        self.suggestions = list(template.suggestions)
        self.retryable = template.retryable
        self.retry_after = retry_after
        self.status_code = status_code
        self.context = context or ErrorContext()
        self.timestamp = timestamp or datetime.now()
        super().__init__(
            f"[{kind.value}] {raw_message or self.user_message}",
            service_id=self.context.endpoint,
        )

    def with_context(self, context: ErrorContext) -> "ClassifiedError":
        """Return a copy of this error bound to ``context``."""
        return ClassifiedError(
            kind=self.kind,
            raw_message=self.raw_message,
            context=context,
            retry_after=self.retry_after,
            status_code=self.status_code,
            timestamp=self.timestamp,
        )

    @property
    def severity(self) -> str:
        return SEVERITY.get(self.kind, "low")

    @property
    def category(self) -> str:
        return CATEGORY.get(self.kind, "api_error")

    @property
    def recovery_actions(self) -> dict[str, list[str]]:
        immediate, short_term, long_term = RECOVERY_ACTIONS.get(
            self.kind, _DEFAULT_RECOVERY
        )
        actions = {
            "immediate": list(immediate),
            "short_term": list(short_term),
            "long_term": list(long_term),
        }
        if (
            self.context.game_type == "image-instinct"
            and self.kind == ErrorKind.TIMEOUT
        ):
            actions["immediate"].insert(0, "Try a text-based game instead")
        return actions

    def user_friendly_message(self) -> str:
        """User message with game context and a wait hint when known."""
        message = self.user_message
        if self.context.game_type:
            message = message.replace(
                "content", f"{self.context.game_type} game content", 1
            )
        if self.retry_after:
            minutes = max(1, -(-int(self.retry_after) // 60))
            plural = "s" if minutes > 1 else ""
            message += f" Please wait {minutes} minute{plural} before trying again."
        return message

    def contextual_suggestions(self) -> list[str]:
        """Suggestions with game-specific hints first."""
        suggestions = list(self.suggestions)
        game_type = self.context.game_type
        if not game_type:
            return suggestions

        if self.kind == ErrorKind.TIMEOUT and game_type == "image-instinct":
            suggestions.insert(
                0, "Image generation can take longer - try a text-based game"
            )
        elif self.kind == ErrorKind.QUALITY:
            suggestions.insert(0, "Try adjusting the difficulty level or topic")
        elif self.kind == ErrorKind.VALIDATION and game_type == "conjugation-coach":
            suggestions.insert(0, "Try a different target language or difficulty")
        return suggestions

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "raw_message": self.raw_message,
            "user_message": self.user_message,
            "suggestions": list(self.suggestions),
            "retryable": self.retryable,
            "retry_after": self.retry_after,
            "status_code": self.status_code,
            "operation": self.context.operation,
            "endpoint": self.context.endpoint,
            "game_type": self.context.game_type,
            "request_id": self.context.request_id,
            "severity": self.severity,
            "category": self.category,
            "timestamp": self.timestamp.isoformat(),
        }
