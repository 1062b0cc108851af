"""Domain errors shared by the ledger, the state machine, the providers and the API layer."""


class WritingBuddyError(Exception):
    """Base class. ``public_message`` is the only text ever shown to a caller."""

    status_code = 500
    public_message = "Something went wrong. Please try again."


class ValidationError(WritingBuddyError):
    status_code = 400
    public_message = "Some required fields are missing or invalid."


class NotFoundError(WritingBuddyError):
    status_code = 404
    public_message = "Session not found."


class InvalidStateError(WritingBuddyError):
    status_code = 400
    public_message = "This session has already been completed."


class AuthError(WritingBuddyError):
    """No owner identity reached us from the auth layer."""

    status_code = 401
    public_message = "Please sign in."


class ProviderError(WritingBuddyError):
    """The AI backend failed. ``status`` and ``message`` are for logs only."""

    status_code = 500
    public_message = "The writing coach could not be reached. Please try again."

    def __init__(self, status: int | None, message: str):
        super().__init__(f"provider error ({status}): {message}")
        self.status = status
        self.message = message
