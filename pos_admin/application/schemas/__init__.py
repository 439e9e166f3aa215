from .envelopes import HealthResponse, RecordListEnvelope, RecordMutationEnvelope

__all__ = [
    "HealthResponse",
    "RecordListEnvelope",
    "RecordMutationEnvelope",
]
