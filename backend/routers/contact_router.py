"""Contact form router for relaying website inquiries."""

from fastapi import APIRouter, Depends, Request
from loguru import logger

from helpers.request_utils import get_client_ip
from models.config import Settings, get_settings
from models.schemas import ContactFormRequest, ContactFormResponse, ErrorResponse
from services.contact_service import ContactService
from services.email_service import EmailProvider, get_email_provider
from services.rate_limit_service import RateLimiter

router = APIRouter(prefix="/contact", tags=["contact"])


def get_rate_limiter(request: Request) -> RateLimiter:
    """Return the application-owned rate limiter (created in main.lifespan)."""
    return request.app.state.rate_limiter


def get_contact_service(
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    provider: EmailProvider = Depends(get_email_provider),
    config: Settings = Depends(get_settings),
) -> ContactService:
    return ContactService(rate_limiter, provider, config)


def get_unblocked_client_ip(
    request: Request,
    service: ContactService = Depends(get_contact_service),
) -> str:
    """Resolve the client IP and turn away blocked clients.

    Dependencies run before the request body is validated, so a blocked
    client gets 429 even when the body is malformed.
    """
    client_ip = get_client_ip(request, service.config.TRUST_PROXY_HEADERS)
    service.ensure_not_blocked(client_ip)
    return client_ip


@router.post(
    "",
    response_model=ContactFormResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def submit_contact_form(
    form: ContactFormRequest,
    client_ip: str = Depends(get_unblocked_client_ip),
    service: ContactService = Depends(get_contact_service),
) -> ContactFormResponse:
    """Submit a contact form.

    Relays the message by email to the site owner.
    No authentication required - public endpoint.
    Rate limited per client IP (3 submissions per hour by default).

    Args:
        form: Contact form data with name, email, tel, subject, and message
        client_ip: Client IP address, already checked against active blocks

    Returns:
        Success response with confirmation message

    Raises:
        RateLimitExceededException: 429 when the client is blocked
        ContactValidationException: 400 with the first validation error
        EmailDeliveryException: 500 if email sending fails
        (all handled by the exception handlers in main.py)
    """
    logger.info(f"Contact form submitted from {client_ip}")

    confirmation = service.submit_contact_form(form, client_ip)

    return ContactFormResponse(success=True, message=confirmation)
