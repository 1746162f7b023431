"""todoapp — multi-user todo backend.

Users sign up and log in with email and password, receive an opaque
session token in the ``x-auth`` header, and manage todos that only
they can see.
"""

__version__ = "0.1.0"
