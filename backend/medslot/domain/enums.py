from enum import Enum


class AdmissionState(str, Enum):
    RECEIVED = "RECEIVED"
    NORMALIZED = "NORMALIZED"
    SLOT_VALIDATED = "SLOT_VALIDATED"
    CONFLICT_CHECKED = "CONFLICT_CHECKED"
    COMMITTED = "COMMITTED"
    REJECTED = "REJECTED"
