"""
Message models for Support Panorama.

Messages only live for the duration of one request: the retriever builds
RawMessage values from Slack records and the pipeline pairs each of them
with its classification.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from panorama.enrichment.gemini_classifier import MessageClassification


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision and a Z suffix."""
    utc_value = value.astimezone(timezone.utc)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class RawMessage:
    """
    A user-authored message as retrieved from the channel history.

    Attributes:
        id: Slack message timestamp string, used verbatim as the message ID
        author: Slack user ID of the author
        text: Message text (empty when the record carries none)
        sent_at: UTC datetime derived from the Slack timestamp
    """

    id: str
    author: str
    text: str
    sent_at: datetime

    @classmethod
    def from_slack_record(cls, record: dict[str, Any]) -> "RawMessage":
        """
        Build a RawMessage from a conversations.history record.

        Raises:
            ValueError: If the record's ``ts`` is missing, not numeric or out of range
        """
        ts = record.get("ts")
        if not isinstance(ts, str):
            raise ValueError(f"Invalid message timestamp: {ts!r}")
        try:
            sent_at = datetime.fromtimestamp(float(ts), tz=timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Message timestamp out of range: {ts!r}") from e
        return cls(
            id=ts,
            author=record["user"],
            text=record.get("text") or "",
            sent_at=sent_at,
        )


@dataclass(frozen=True)
class EnrichedMessage:
    """A retrieved message merged with its classification."""

    message: RawMessage
    classification: "MessageClassification"

    def to_dict(self) -> dict[str, Any]:
        """Convert enriched message to the dictionary returned to callers."""
        return {
            "id": self.message.id,
            "author": self.message.author,
            "text": self.message.text,
            "timestamp": format_timestamp(self.message.sent_at),
            **self.classification.to_dict(),
        }
