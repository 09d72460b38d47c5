"""
JiraBot - JIRA Tickets from Slack
=================================

A Slack bot that lets a team look up, search and create JIRA tickets
without leaving the channel.

This package provides:
- Command dispatch for `.projects`, `.project`, `.create`, `.query` and `.help`
- Passive lookup of ticket keys (ABC-123) mentioned in any message
- A small async JIRA REST client with an expiring lookup cache
- Slack attachment formatting for issues and search results
"""

__version__ = "1.0.0"
