from rest_framework import status


class TaskHiveError(Exception):
    """Base class for rule violations reported back to the caller."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationFailed(TaskHiveError):
    """A required field is empty or a value is outside its allowed set."""
    status_code = status.HTTP_400_BAD_REQUEST


class AccessDenied(TaskHiveError):
    """The identity lacks the role an operation needs."""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message, required_role=None):
        super().__init__(message)
        self.required_role = required_role


class InvalidTransition(TaskHiveError):
    """The task is not in the state the operation expects."""
    status_code = status.HTTP_409_CONFLICT

