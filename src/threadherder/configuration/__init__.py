"""
Configuration management for Thread Herder.

- **app_configuration.py**: YAML configuration loader for global settings:
  sweep interval, solved/stale thresholds, tag names, moderator roles, bypass
  users and the optional log directory. Falls back to defaults on missing or
  malformed config files.
"""
