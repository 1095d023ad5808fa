"""
Exceptions - Failure types raised by the generation pipeline
"""

class ClassPilotError(Exception):
    """Base class for pipeline errors."""

class ProviderFailure(ClassPilotError):
    """The completion provider errored, timed out, or returned nothing usable."""

    def __init__(self, message: str, intent: str = None):
        super().__init__(message)
        self.intent = intent

class SinkFailure(ClassPilotError):
    """The module store could not accept a save."""
