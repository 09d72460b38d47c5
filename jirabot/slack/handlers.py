"""
Slack Event Handlers
====================

Receives Slack message events and hands them to the dispatcher.

Handler Pattern:
    1. Receive a message event from Slack
    2. Drop bot messages and subtypes (edits, joins, our own replies)
    3. Resolve the sender's name and email (cached for a day)
    4. Let the dispatcher decide what, if anything, to reply
"""

from slack_bolt.async_app import AsyncApp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from jirabot.commands import Sender
from jirabot.commands.dispatcher import CommandDispatcher
from jirabot.memory import ExpiringCache
from jirabot.utils.logger import Logger

logger = Logger("Handlers")

PROFILE_TTL_MS = 86_400_000  # 1 day

# Set during registration
_dispatcher: CommandDispatcher | None = None
_profiles: ExpiringCache | None = None


def register_handlers(
    app: AsyncApp,
    dispatcher: CommandDispatcher,
    profiles: ExpiringCache | None = None
) -> None:
    """
    Register event handlers with the Slack app.

    Args:
        app: The Bolt app instance
        dispatcher: Routes messages to commands
        profiles: Cache for sender profiles
    """
    global _dispatcher, _profiles
    _dispatcher = dispatcher
    _profiles = profiles if profiles is not None else ExpiringCache()

    app.event("message")(_handle_message)

    logger.info("Registered Slack event handlers")


async def resolve_sender(client: AsyncWebClient, user_id: str, profiles: ExpiringCache) -> Sender:
    """
    Look up a Slack user's display name and email.

    Falls back to the bare user id if users.info fails, so a command can
    still run (it just cannot be attributed to a JIRA account).
    """
    cache_key = f"slack|{user_id}"
    cached = profiles.get(cache_key)
    if cached is not None:
        return cached

    try:
        response = await client.users_info(user=user_id)
    except SlackApiError as e:
        logger.warning(f"users.info failed for {user_id}", {"error": str(e)})
        return Sender(user_id=user_id, display_name=user_id)

    user = response.get("user") or {}
    profile = user.get("profile") or {}
    sender = Sender(
        user_id=user_id,
        display_name=(
            profile.get("real_name")
            or user.get("real_name")
            or profile.get("display_name")
            or user_id
        ),
        email=profile.get("email") or "",
    )

    profiles.put(cache_key, sender, PROFILE_TTL_MS)
    return sender


async def _handle_message(event: dict, client: AsyncWebClient) -> None:
    """
    Handle any message the bot can see (channels it is in, and DMs).

    Args:
        event: The Slack event data
        client: Slack API client
    """
    # Ignore bot messages (including our own)
    if event.get("bot_id"):
        return

    # Ignore message subtypes (edits, deletes, joins, etc.)
    if event.get("subtype"):
        return

    if _dispatcher is None or _profiles is None:
        logger.error("Dispatcher not initialized")
        return

    user_id = event.get("user")
    channel_id = event.get("channel")
    text = event.get("text", "")

    if not user_id or not channel_id or not text:
        return

    sender = await resolve_sender(client, user_id, _profiles)
    await _dispatcher.handle(channel_id, text, sender)
