"""
Settings store for runbot.

Public API:
    - KeyValueStore: interface the settings layer depends on
    - RedisStore: Redis implementation of KeyValueStore
    - KeyEncoder: key naming for channel values and server defaults
"""
