"""Authentication and authorization.

Learn: One authentication path only:
users → email/password → opaque signed token in the x-auth header.

Tokens never expire on their own. A token works until the session it
belongs to is revoked (logout), because every request re-checks it
against the user's registered sessions.
"""
