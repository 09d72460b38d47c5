"""
Configuration Management
========================

All environment variables the bot reads are declared, validated and typed
here. Values come from the process environment, with a `.env` file in the
working directory loaded first (see `.env.example`).

Required:
    SLACK_BOT_TOKEN   xoxb-... token used to post messages
    SLACK_APP_TOKEN   xapp-... token for the Socket Mode connection
    JIRA_HOST         JIRA hostname, e.g. jira.example.com
    JIRA_USER         JIRA login used by the bot
    JIRA_PASS         password or API token for JIRA_USER

Optional:
    SLACK_SIGNING_SECRET  only needed when serving HTTP instead of Socket Mode
    JIRA_PORT             default 443
    JIRA_TIMEOUT_SECONDS  default 10
    COMMAND_PREFIX        default "."
    LOG_LEVEL             default "info", read by jirabot.utils.logger

Usage:
    from jirabot.utils.config import get_config

    config = get_config()
    print(config.jira.host)
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from jirabot.utils.logger import Logger

logger = Logger("Config")


def _required(name: str) -> str:
    """
    Get a required environment variable.

    Raises:
        ValueError: If the variable is not set or empty
    """
    value = os.getenv(name)
    if not value:
        raise ValueError(
            f"Missing required environment variable: {name}\n"
            f"Please ensure {name} is set in your .env file."
        )
    return value


def _optional(name: str, default: str) -> str:
    return os.getenv(name) or default


def _optional_int(name: str, default: int) -> int:
    """Get an integer environment variable, falling back to `default` if invalid."""
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name} is not a valid integer, using default: {default}")
        return default


@dataclass(frozen=True)
class SlackConfig:
    """Slack API configuration."""
    bot_token: str       # xoxb-... token for bot operations
    app_token: str       # xapp-... token for Socket Mode
    signing_secret: str  # For verifying HTTP requests (unused in Socket Mode)


@dataclass(frozen=True)
class JiraConfig:
    """JIRA server connection settings."""
    host: str
    port: int
    username: str
    password: str
    timeout_seconds: int


@dataclass(frozen=True)
class BotConfig:
    """Chat-facing behaviour."""
    command_prefix: str  # Messages starting with this are commands (".create ...")


@dataclass(frozen=True)
class Config:
    """
    Root configuration object.

        config = get_config()
        config.slack.bot_token
        config.jira.host
        config.bot.command_prefix
    """
    slack: SlackConfig
    jira: JiraConfig
    bot: BotConfig


def load_config() -> Config:
    """
    Load and validate all configuration from the environment.

    Returns:
        Config: The validated configuration

    Raises:
        ValueError: If required configuration is missing
    """
    load_dotenv()

    return Config(
        slack=SlackConfig(
            bot_token=_required("SLACK_BOT_TOKEN"),
            app_token=_required("SLACK_APP_TOKEN"),
            signing_secret=_optional("SLACK_SIGNING_SECRET", ""),
        ),
        jira=JiraConfig(
            host=_required("JIRA_HOST"),
            port=_optional_int("JIRA_PORT", 443),
            username=_required("JIRA_USER"),
            password=_required("JIRA_PASS"),
            timeout_seconds=_optional_int("JIRA_TIMEOUT_SECONDS", 10),
        ),
        bot=BotConfig(
            command_prefix=_optional("COMMAND_PREFIX", "."),
        ),
    )


# Loaded once on first access and shared by every module.
_config_instance: Config | None = None


def get_config() -> Config:
    """Get the singleton configuration instance, loading it on first call."""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def reset_config() -> None:
    """Forget the loaded configuration so the next get_config() re-reads it."""
    global _config_instance
    _config_instance = None
