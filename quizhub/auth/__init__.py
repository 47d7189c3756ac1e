"""
User records and caller identity.

There is no login flow: a request names its user through the ``X-User-Id``
header, or falls back to the configured default user.
"""
