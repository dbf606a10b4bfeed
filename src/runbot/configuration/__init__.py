"""
Configuration management for runbot.

- **app_configuration.py**: YAML configuration loader for global settings:
  catalog location, Redis connection and timeouts, and the chat command
  prefix. Falls back to defaults on a missing or malformed file.
"""
