"""
Error taxonomy for the data-access layer
"""
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return self.message


class DataAccessError(Exception):
    """Base class for every error raised by socialdata"""


class ValidationError(DataAccessError):
    """Local, pre-write validation failure"""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__(", ".join(self.messages))

    @property
    def messages(self) -> List[str]:
        return [error.message for error in self.errors]

    def for_field(self, field: str) -> List[str]:
        return [error.message for error in self.errors if error.field == field]


class NotFoundError(DataAccessError):
    """Requested document does not exist"""


class ConflictError(DataAccessError):
    """Operation conflicts with existing records (already a member, event full)"""


class RemoteOperationError(DataAccessError):
    """Store failure; the message is the store client's own"""


class ProviderAuthError(DataAccessError):
    """Identity provider failure; the message is surfaced to the end user as-is"""

    def __init__(self, message: str, code: str = "auth/internal-error"):
        self.code = code
        super().__init__(message)


class ImageProcessingError(DataAccessError):
    pass


class ImageTooLargeError(ImageProcessingError):
    pass
