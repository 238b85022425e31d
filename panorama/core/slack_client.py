"""Slack client for retrieving recent support channel messages.

This module provides SlackHistoryClient, which reads a fixed-size batch of
the most recent messages from one Slack channel through the Web API
``conversations.history`` method and keeps only genuine user-authored
messages.

Key features:
- Bearer-token authentication
- Fixed batch size per request
- Filtering of system, bot and join/leave events
- Upstream failures surfaced as UpstreamError with Slack's own error detail
"""

import logging
from typing import Any, Optional

import httpx

from panorama.core.config import Settings
from panorama.core.errors import ConfigurationError, UpstreamError
from panorama.core.models import RawMessage

logger = logging.getLogger(__name__)

SLACK_HISTORY_URL = "https://slack.com/api/conversations.history"

# Number of messages read per request
HISTORY_BATCH_SIZE = 20

# Message subtypes that are channel events rather than user messages
SYSTEM_SUBTYPES = frozenset(
    {
        "bot_message",
        "channel_join",
        "channel_leave",
        "channel_topic",
        "channel_purpose",
        "channel_name",
        "channel_archive",
        "channel_unarchive",
        "group_join",
        "group_leave",
        "pinned_item",
        "unpinned_item",
    }
)


def is_user_message(record: dict[str, Any]) -> bool:
    """Check whether a history record is a genuine user-authored message.

    Args:
        record: Raw record from the ``messages`` array

    Returns:
        True if the record has the ``message`` type, a non-empty author
        and no system subtype
    """
    if record.get("type") != "message":
        return False
    user = record.get("user")
    if not isinstance(user, str) or not user:
        return False
    return record.get("subtype") not in SYSTEM_SUBTYPES


class SlackHistoryClient:
    """Client for the Slack ``conversations.history`` endpoint.

    Attributes:
        bot_token: Slack bot token
        channel_id: Channel to read
        http_client: Shared async HTTP client
    """

    def __init__(
        self,
        bot_token: Optional[str],
        channel_id: Optional[str],
        http_client: httpx.AsyncClient,
    ) -> None:
        """Initialize Slack history client.

        Args:
            bot_token: Slack bot token (may be None, checked on fetch)
            channel_id: Slack channel ID (may be None, checked on fetch)
            http_client: Async HTTP client used for the request
        """
        self.bot_token = bot_token
        self.channel_id = channel_id
        self.http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "SlackHistoryClient":
        return cls(settings.slack_bot_token, settings.slack_channel_id, http_client)

    async def fetch_messages(self) -> list[RawMessage]:
        """Fetch the most recent user messages from the channel.

        Returns:
            Up to HISTORY_BATCH_SIZE messages, in the order Slack returned them

        Raises:
            ConfigurationError: If the bot token or channel ID is missing
            UpstreamError: If the request fails or Slack reports an error
        """
        if not self.bot_token or not self.channel_id:
            raise ConfigurationError(
                "SLACK_BOT_TOKEN and SLACK_CHANNEL_ID environment variables must be set"
            )

        logger.info(f"Fetching up to {HISTORY_BATCH_SIZE} messages from channel {self.channel_id}")

        try:
            response = await self.http_client.get(
                SLACK_HISTORY_URL,
                params={"channel": self.channel_id, "limit": HISTORY_BATCH_SIZE},
                headers={"Authorization": f"Bearer {self.bot_token}"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Slack request failed: {e}")
            raise UpstreamError(f"Slack request failed: {e}") from e

        data = self._decode_body(response)

        if not response.is_success:
            detail = data.get("error") if data else None
            raise UpstreamError(
                f"Slack API error: HTTP {response.status_code}"
                + (f" ({detail})" if detail else ""),
                status_code=response.status_code,
            )
        if data is None:
            raise UpstreamError(
                "Slack API error: response body is not a JSON object",
                status_code=response.status_code,
            )
        if not data.get("ok"):
            raise UpstreamError(
                f"Slack API error: {data.get('error', 'unknown_error')}",
                status_code=response.status_code,
            )

        records = data.get("messages") or []
        logger.info(f"Found {len(records)} messages")

        messages = []
        for record in records:
            if not isinstance(record, dict) or not is_user_message(record):
                continue
            try:
                messages.append(RawMessage.from_slack_record(record))
            except ValueError as e:
                logger.warning(f"Skipping message with invalid timestamp: {e}")

        logger.debug(f"{len(messages)} user messages kept after filtering")
        return messages

    @staticmethod
    def _decode_body(response: httpx.Response) -> Optional[dict[str, Any]]:
        """Decode a JSON object body, returning None if it is not one."""
        try:
            data = response.json()
        except ValueError:
            logger.debug(f"Non-JSON Slack response: {response.text[:200]}")
            return None
        return data if isinstance(data, dict) else None
