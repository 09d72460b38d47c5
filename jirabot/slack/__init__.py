"""
Slack Integration
=================

Handles all Slack-related functionality:
- Bolt app and Socket Mode initialization
- Message event handling and sender lookup
- Reply delivery through chat.postMessage
"""

from jirabot.slack.app import create_slack_app, create_socket_handler
from jirabot.slack.handlers import register_handlers
from jirabot.slack.transport import SlackTransport

__all__ = ["create_slack_app", "create_socket_handler", "register_handlers", "SlackTransport"]
