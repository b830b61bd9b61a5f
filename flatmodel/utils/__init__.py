"""
Generic utility functions shared across modules.

Includes the clock abstraction used to stamp backup files.
"""
