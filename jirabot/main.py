"""
JiraBot - Main Entry Point
==========================

Wires everything together and starts the bot:
1. Loads configuration
2. Creates the lookup cache and JIRA client
3. Builds the command set and dispatcher
4. Sets up the Slack app and handlers
5. Connects over Socket Mode

Run with:
    python -m jirabot.main

Or after installing:
    jirabot
"""

import asyncio
import signal
import sys

from jirabot.utils.config import get_config
from jirabot.utils.logger import Logger

main_logger = Logger("Main")


async def main():
    """Initialize all components and run until interrupted."""
    main_logger.info("Starting JiraBot...")

    try:
        # 1. Load configuration (validates required env vars)
        main_logger.info("Loading configuration...")
        config = get_config()

        # 2. Cache and JIRA client
        main_logger.info(f"Connecting to JIRA at {config.jira.host}...")
        from jirabot.memory import ExpiringCache
        from jirabot.jira import JiraClient
        jira = JiraClient(config.jira, ExpiringCache())

        # 3. Create Slack app
        main_logger.info("Creating Slack app...")
        from jirabot.slack import SlackTransport, create_slack_app, create_socket_handler
        app = create_slack_app(config.slack)

        # 4. Commands and dispatcher
        main_logger.info("Setting up commands...")
        from jirabot.commands.dispatcher import CommandDispatcher
        from jirabot.commands.jira_commands import JiraCommands
        commands = JiraCommands(jira, prefix=config.bot.command_prefix)
        dispatcher = CommandDispatcher(
            registry=commands.build_registry(),
            passive_handler=commands.catch_all,
            transport=SlackTransport(app.client),
            jira_host=config.jira.host,
            prefix=config.bot.command_prefix,
        )

        # 5. Register event handlers
        main_logger.info("Registering event handlers...")
        from jirabot.slack import register_handlers
        register_handlers(app, dispatcher, ExpiringCache())

        # 6. Start the Socket Mode handler
        main_logger.info("Starting Socket Mode connection...")
        handler = await create_socket_handler(app, config.slack)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(
                sig,
                lambda: asyncio.create_task(_shutdown(handler, jira))
            )

        main_logger.info("JiraBot is running! Press Ctrl+C to stop.")
        await handler.start_async()

    except KeyboardInterrupt:
        main_logger.info("Received interrupt signal")
    except Exception as e:
        main_logger.error("Failed to start bot", e)
        sys.exit(1)


async def _shutdown(handler, jira):
    """
    Graceful shutdown handler.

    Args:
        handler: The Socket Mode handler
        jira: The JIRA client, whose connection pool is closed
    """
    main_logger.info("Shutting down...")

    await handler.close_async()
    await jira.aclose()

    main_logger.info("Shutdown complete")


def run():
    """Synchronous entry point for the `jirabot` command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
