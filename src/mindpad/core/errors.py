"""
Domain Errors

Exceptions surfaced to callers of the note store and quick-capture flow.
Provider failures are never raised: they are reported as values
(see ``mindpad.services.ai.EmbeddingFailure``).
"""


class MindpadError(Exception):
    """Base class for all mindpad domain errors."""


class NoteNotFoundError(MindpadError):
    """An operation referenced a note id that does not exist."""

    def __init__(self, note_id: str) -> None:
        super().__init__(f"Note {note_id} not found")
        self.note_id = note_id


class ValidationError(MindpadError):
    """Input rejected locally; the operation had no effect."""


class NoPendingCaptureError(MindpadError):
    """A quick-capture transition was requested while no capture is pending."""

    def __init__(self) -> None:
        super().__init__("No pending quick capture")
