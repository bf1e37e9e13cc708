"""
Core utilities shared across the task API.

This package hosts configuration (env vars, database path), logging setup,
clock/ISO helpers and query-string coercion. Routers and services depend on
these primitives instead of reading os.environ directly.
"""
