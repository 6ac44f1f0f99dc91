"""
Error taxonomy for the detection workflow.

Validation errors are terminal for a single submission attempt.
A corrected file is a brand new submission.
"""


class ScanRejected(Exception):
    """Raised when an upload fails validation before inference."""

    reason = "REJECTED"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedType(ScanRejected):
    reason = "UNSUPPORTED_TYPE"


class TooLarge(ScanRejected):
    reason = "TOO_LARGE"


class InferenceFailure(Exception):
    """Inference did not produce an outcome. Nothing is written to the ledger."""


class InferenceTimeout(InferenceFailure):
    pass


class EntryNotFound(LookupError):
    pass
