"""
Runbot - compiler settings for Discord servers

Runbot runs code blocks posted in Discord through a remote compile provider.
This package holds the part that decides which compiler applies where.

Core Components:

- **Catalog**: static registry of languages, aliases and compilers loaded
  from YAML at startup.
- **Store**: Redis-backed key-value adapter for per-channel and per-server
  settings.
- **Settings Resolver**: channel value, then server default, then built-in
  default; server-wide writes reach every customised channel.
- **Resolution Engine**: turns a language or compiler name into the
  compiler to use, honouring remap overrides.
"""
