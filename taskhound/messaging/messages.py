"""Structured message models for the notification sink.

Pydantic models that decouple message content from presentation.
NO Rich markup or formatting should be embedded in any string fields.
Renderers decide how to display these structured messages.
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

# =============================================================================
# Enums
# =============================================================================


class MessageLevel(str, Enum):
    """Severity level for text messages."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


# =============================================================================
# Text Messages
# =============================================================================


class TextMessage(BaseModel):
    """Simple text message with a severity level. Text must be plain, no markup!"""

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier for this message instance",
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When this message was created (UTC)",
    )
    level: MessageLevel = Field(description="Severity level of this message")
    text: str = Field(description="Plain text content - NO Rich markup allowed")
    log_time: str = Field(
        default="",
        description="Local time of emission, formatted with the configured pattern",
    )

    model_config = {"frozen": True, "extra": "forbid"}
