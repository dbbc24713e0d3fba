"""
Core utilities shared across the AYNI API.

This package hosts configuration (env vars, paths, feature flags), the
credential primitives (password hashing, session tokens), the error taxonomy
and logging setup. Routers and services depend on these primitives instead of
reading os.environ or talking to the token library directly.
"""
