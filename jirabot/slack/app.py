"""
Slack Bolt App
==============

Creates the Slack Bolt application and its Socket Mode connection.

Socket Mode keeps a WebSocket open to Slack, so the bot receives events
without exposing a public URL.
"""

from slack_bolt.async_app import AsyncApp
from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler

from jirabot.utils.config import SlackConfig
from jirabot.utils.logger import Logger

logger = Logger("SlackApp")


def create_slack_app(config: SlackConfig) -> AsyncApp:
    """
    Create the Bolt app with the bot token.

    Args:
        config: Slack tokens

    Returns:
        Configured AsyncApp instance
    """
    app = AsyncApp(
        token=config.bot_token,
        signing_secret=config.signing_secret or None,
    )

    logger.info("Slack Bolt app created")

    return app


async def create_socket_handler(app: AsyncApp, config: SlackConfig) -> AsyncSocketModeHandler:
    """Create a Socket Mode handler for the app using the xapp- token."""
    handler = AsyncSocketModeHandler(
        app=app,
        app_token=config.app_token
    )

    logger.info("Socket Mode handler created")

    return handler
