"""User-related exceptions."""

from fastapi import HTTPException, status


class UserCreationFailed(HTTPException):
    """Raised when the store refuses a new user.

    Duplicate usernames land here too: the response does not say whether the
    name is taken.
    """

    def __init__(self, detail: str = "Failed to create user"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
