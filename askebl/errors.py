"""Exceptions raised by the AskEBL chat and data layers."""


class InvalidInputError(ValueError):
    """Raised when a blank utterance reaches the conversation engine."""


class PersistenceError(RuntimeError):
    """Raised when the suggestion sink cannot store a suggested question."""


class AuthenticationError(ValueError):
    """Raised when login credentials are malformed or do not match a user."""
