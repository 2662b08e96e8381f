"""Domain errors raised by the record and profile operations.

Each request-level error carries the numeric code and message the upstream
service reports in ``sourceFaultDetail.detail`` (``"error: 026, message: ..."``).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from trader_goods_stub.core.validation import ValidationError
    from trader_goods_stub.models import AccreditationStatus


class StubError(Exception):
    """Base class for errors that map to a 400 ``Bad Request`` response."""

    code: ClassVar[str] = "000"
    message: ClassVar[str] = "Invalid Request Parameter"

    @property
    def detail(self) -> str:
        return f"error: {self.code}, message: {self.message}"


class ProfileNotFoundError(StubError):
    code = "007"


class DuplicateTraderRefError(StubError):
    code = "010"


class RecordNotFoundError(StubError):
    code = "026"


class RecordLockedError(StubError):
    code = "027"
    message = "Invalid Request"


class RecordInactiveError(StubError):
    code = "031"
    message = "Invalid Request"


class RecordAlreadyRemovedError(RecordInactiveError):
    message = "Invalid Request Parameter"


class DuplicateEoriError(StubError):
    code = "038"


class IllegalAccreditationTransitionError(Exception):
    def __init__(self, current: AccreditationStatus, target: AccreditationStatus) -> None:
        super().__init__(f"Cannot move accreditation status from {current.value!r} to {target.value!r}")
        self.current = current
        self.target = target


class ValidationFailedError(Exception):
    """A request body did not satisfy its schema."""

    def __init__(self, errors: Sequence[ValidationError]) -> None:
        super().__init__(f"{len(errors)} validation error(s)")
        self.errors = list(errors)


class InvalidJsonError(Exception):
    """A request body could not be parsed as JSON."""
