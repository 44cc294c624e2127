from .canonical_profile import CanonicalProfile, COLLECTION_FIELDS
from .extraction_job import ExtractionJob
from .extraction_result import ExtractionResult
from .extraction_status import ExtractionStatusRecord, DedupOutcome

__all__ = [
    "CanonicalProfile",
    "COLLECTION_FIELDS",
    "ExtractionJob",
    "ExtractionResult",
    "ExtractionStatusRecord",
    "DedupOutcome",
]
