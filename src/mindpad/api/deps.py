"""
API Dependencies

FastAPI dependencies resolving the process-wide services stored on
``app.state`` by the lifespan handler.
"""

from fastapi import Request

from mindpad.services.capture import QuickCaptureCoordinator
from mindpad.services.container import Services
from mindpad.services.notes import NoteService


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_note_service(request: Request) -> NoteService:
    """FastAPI dependency - returns the shared NoteService."""
    return get_services(request).notes


def get_capture(request: Request) -> QuickCaptureCoordinator:
    """FastAPI dependency - returns the single quick-capture coordinator."""
    return get_services(request).capture
