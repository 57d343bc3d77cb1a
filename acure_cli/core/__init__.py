"""Core client logic: routing, session, cache and REST access."""
