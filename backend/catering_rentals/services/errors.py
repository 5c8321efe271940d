"""Exceptions raised by the booking workflows."""

import uuid


class BlockingPrompt(Exception):
    """Client-side validation failed; the user must fix the form before continuing."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingRowError(LookupError):
    """A row the workflow depends on does not exist."""

    def __init__(self, table: str, row_id: uuid.UUID, message: str) -> None:
        super().__init__(message)
        self.table = table
        self.row_id = row_id
        self.message = message
