from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request

from app.core.rate_limit import get_client_id
from app.schemas.contact import ContactRequest, ContactResponse, ErrorResponse
from app.services.contact_service import SUCCESS_MESSAGE, ContactService

router = APIRouter(tags=["Contact"])


def get_contact_service(request: Request) -> ContactService:
    """Return the service instance owned by the running app."""
    return request.app.state.contact_service


@router.post(
    "/contact",
    response_model=ContactResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation failed"},
        413: {"model": ErrorResponse, "description": "Body larger than the limit"},
        429: {"model": ErrorResponse, "description": "Too many submissions"},
        500: {"model": ErrorResponse, "description": "Email delivery unavailable"},
    },
)
async def submit_contact(
    client_id: Annotated[str, Depends(get_client_id)],
    service: Annotated[ContactService, Depends(get_contact_service)],
    payload: Annotated[ContactRequest | None, Body()] = None,
) -> ContactResponse:
    """Contact form submission endpoint.

    Validates the fields, applies the per-client rate limit and forwards
    the message by email. Errors are raised as AppError subclasses and
    rendered by the global exception handlers.

    Returns:
        ContactResponse: Confirmation with the provider message id.
    """
    fields = payload.model_dump() if payload is not None else {}
    result = await service.submit(client_id, fields)
    return ContactResponse(success=True, message=SUCCESS_MESSAGE, id=result.message_id)
