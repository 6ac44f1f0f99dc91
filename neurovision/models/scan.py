from dataclasses import dataclass


@dataclass(frozen=True)
class ScanSubmission:
    """
    Metadata of one uploaded scan.
    Raw bytes are never carried past the upload boundary.
    """
    file_name: str
    mime_type: str
    size_bytes: int

    def __post_init__(self):
        if self.size_bytes < 0:
            raise ValueError("size_bytes must be >= 0")
