"""
swatchkit Error Types
"""


class PreconditionError(ValueError):
    """Caller supplied invalid arguments (k < 1, malformed buffer, ...)."""
    pass


class InputUnavailableError(Exception):
    """The image collaborator could not produce a pixel buffer."""
    pass
