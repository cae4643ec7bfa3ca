"""
Error handling utilities for consistent error message extraction.
"""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Exceptions raised without a message (``TimeoutError()``) report
    their class name so the result record never carries an empty error.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
