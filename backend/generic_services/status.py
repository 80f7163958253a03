"""
Status objects returned by GenericServices and by entity methods.

A status collects validation errors instead of raising, so a page can show
every problem at once. Entity methods that can fail return a StatusGeneric;
the service combines those errors into its own status.
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, Tuple, TypeVar

T = TypeVar('T')

DEFAULT_SUCCESS_MESSAGE = "Success"


@dataclass(frozen=True)
class ValidationResult:
    """One error, optionally tied to the names of the members it concerns"""

    error_message: str
    member_names: Tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.error_message


class StatusGeneric:
    """
    Holds a list of errors and a success message.

    The message reads "Success" (or whatever was set) while there are no
    errors, and "Failed with N error(s)" once any error has been added.
    """

    def __init__(self, header: str = ""):
        self.header = header
        self._errors: List[ValidationResult] = []
        self._success_message = DEFAULT_SUCCESS_MESSAGE

    @property
    def errors(self) -> Tuple[ValidationResult, ...]:
        return tuple(self._errors)

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    @property
    def message(self) -> str:
        if self._errors:
            count = len(self._errors)
            return f"Failed with {count} error{'s' if count > 1 else ''}"
        return self._success_message

    @message.setter
    def message(self, value: str) -> None:
        self._success_message = value

    def add_error(self, error_message: str, *member_names: str) -> "StatusGeneric":
        """
        Add an error.

        Args:
            error_message: Text of the error
            *member_names: Names of the properties the error refers to

        Returns:
            This status, so calls can be chained
        """
        if self.header:
            error_message = f"{self.header}: {error_message}"
        self._errors.append(ValidationResult(error_message, tuple(member_names)))
        return self

    def add_validation_result(self, result: ValidationResult) -> "StatusGeneric":
        self._errors.append(result)
        return self

    def combine_errors(self, other: Optional["StatusGeneric"]) -> "StatusGeneric":
        """Copy the errors of another status into this one. The message is kept."""
        if other is not None:
            self._errors.extend(other.errors)
        return self

    def get_all_errors(self, separator: str = "\n") -> Optional[str]:
        """All error messages joined with the separator, or None when valid"""
        if not self._errors:
            return None
        return separator.join(str(error) for error in self._errors)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} valid={self.is_valid} message={self.message!r}>"


class StatusGenericWithResult(StatusGeneric, Generic[T]):
    """A status that also carries a result, e.g. the entity built by a factory"""

    def __init__(self, header: str = ""):
        super().__init__(header)
        self._result: Optional[T] = None

    @property
    def result(self) -> Optional[T]:
        # A result is never handed out alongside errors
        return None if self.has_errors else self._result

    def set_result(self, result: T) -> "StatusGenericWithResult[T]":
        self._result = result
        return self
