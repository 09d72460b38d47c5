"""
Slack Transport
===============

Delivers dispatcher replies with the Slack Web API (chat.postMessage).

A reply that cannot be delivered is logged and dropped: Slack API errors,
SDK client errors and network failures (connection errors, timeouts) never
reach the dispatcher. Anything else propagates.
"""

import asyncio

import aiohttp
from slack_sdk.errors import SlackClientError
from slack_sdk.web.async_client import AsyncWebClient

from jirabot.formatting import Response
from jirabot.utils.logger import Logger

logger = Logger("SlackTransport")


class SlackTransport:
    """
    ChatTransport backed by a Slack AsyncWebClient.

    Example:
        transport = SlackTransport(app.client)
        await transport.send("C123", Response("JIRA Projects keys: ABC, DEF"))
    """

    def __init__(self, client: AsyncWebClient):
        self.client = client

    async def send(self, channel: str, response: Response) -> None:
        """Post `response` to `channel`. Delivery failures are logged, not raised."""
        try:
            await self.client.chat_postMessage(channel=channel, **response.to_message())
        except (SlackClientError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to post to {channel}", e)
