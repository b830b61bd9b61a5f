"""
Configuration for flatmodel stores.

Holds the per-store declaration (path, dialect, policy, casts) and the
environment-driven settings that supply defaults for it.
"""
