class InputError(ValueError):
    """Raised when the note text is missing, empty or not a string."""


class ProcessingError(RuntimeError):
    """Raised when a pipeline stage fails unexpectedly."""
