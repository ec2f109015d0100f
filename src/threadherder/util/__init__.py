"""
Utility functions and helpers for Thread Herder.

This package provides reusable utilities:

- **logger.py**: Centralized logging configuration with colored console output
  through prompt_toolkit and an optional rotating session log file. Silences
  Discord and networking internals.

- **discord_utils.py**: Stateless Discord helpers: converting py-cord threads
  into immutable snapshots, decoding last-activity time from snowflakes, forum
  and message-kind checks, and the solved-command permission check.
"""
