"""
Core utilities shared across the Tapcard service.

This package hosts configuration helpers (env vars, public URLs, feature
flags) and cross-cutting concerns such as logging, rate limiting and URL
helpers. Domain and service modules depend on these primitives instead of
reading os.environ directly.
"""
