"""
Upload Validator
----------------
Static allow-list of media types plus a byte-size ceiling.
The type check always runs before the size check.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from neurovision.errors import TooLarge, UnsupportedType
from neurovision.models.scan import ScanSubmission

ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "application/dicom",
}

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

UNSUPPORTED_TYPE_MESSAGE = "Only JPG, PNG, and DICOM files are allowed."


class RejectionReason(str, Enum):
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    TOO_LARGE = "TOO_LARGE"


@dataclass(frozen=True)
class ValidationResult:
    accepted: bool
    reason: Optional[RejectionReason] = None
    message: str = ""

    def raise_for_rejection(self) -> None:
        if self.accepted:
            return
        if self.reason == RejectionReason.UNSUPPORTED_TYPE:
            raise UnsupportedType(self.message)
        raise TooLarge(self.message)


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """'Image/PNG; charset=binary' -> 'image/png'"""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def size_limit_message(max_bytes: int) -> str:
    return f"File size exceeds {max_bytes // (1024 * 1024)}MB limit"


def validate(
    mime_type: Optional[str],
    size_bytes: int,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed_types: Iterable[str] = ALLOWED_MIME_TYPES,
) -> ValidationResult:
    if normalize_mime_type(mime_type) not in set(allowed_types):
        return ValidationResult(
            accepted=False,
            reason=RejectionReason.UNSUPPORTED_TYPE,
            message=UNSUPPORTED_TYPE_MESSAGE,
        )

    if size_bytes > max_bytes:
        return ValidationResult(
            accepted=False,
            reason=RejectionReason.TOO_LARGE,
            message=size_limit_message(max_bytes),
        )

    return ValidationResult(accepted=True)


def validate_submission(
    submission: ScanSubmission,
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    allowed_types: Iterable[str] = ALLOWED_MIME_TYPES,
) -> ValidationResult:
    return validate(
        submission.mime_type,
        submission.size_bytes,
        max_bytes=max_bytes,
        allowed_types=allowed_types,
    )
