class HandoverError(Exception):
    """Base class for handover processing failures."""


class PatientNotFoundError(HandoverError):
    def __init__(self, patient_id: int):
        self.patient_id = patient_id
        super().__init__(f"Patient {patient_id} not found")


class AudioUploadError(HandoverError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ISBARGenerationError(HandoverError):
    def __init__(self, reason: str, raw_response: str = ""):
        self.reason = reason
        self.raw_response = raw_response
        super().__init__(f"ISBAR generation failed: {reason}")
