import logging

from fastapi import APIRouter, Depends

from checkin_api.api.deps import get_confirmation_service
from checkin_api.schemas import ConfirmRequest, ConfirmResponse
from checkin_api.services.confirmation import ConfirmationService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/confirm", response_model=ConfirmResponse)
def confirm(
    payload: ConfirmRequest,
    service: ConfirmationService = Depends(get_confirmation_service),
):
    """
    Confirm attendance for a pre-registered CPF in the current event day.
    Failures are raised as ConfirmationError and rendered by the app handler.
    """
    return service.confirm(payload.cpf)
