from typing import List


class SnackItError(Exception):
    pass


class Unauthorized(SnackItError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class PayloadError(SnackItError):
    pass


class PublishError(SnackItError):
    def __init__(self, step: str, cause: Exception, completed: List[str] | None = None):
        super().__init__(f"publish failed at {step}: {cause}")
        self.step = step
        self.cause = cause
        self.completed = list(completed or [])
