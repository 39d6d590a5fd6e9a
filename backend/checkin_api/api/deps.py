from fastapi import Request

from checkin_api.services.confirmation import ConfirmationService
from checkin_api.services.state import AppState


def get_app_state(request: Request) -> AppState:
    """Process-wide roster state attached to the application"""
    return request.app.state.checkin_state


def get_confirmation_service(request: Request) -> ConfirmationService:
    return request.app.state.confirmation_service
