"""Contact form endpoints.

Submitting the form and reading the summary statistics are public; the
inbox itself is restricted to admins.
"""

from fastapi import APIRouter, Depends, Request
from starlette.status import HTTP_201_CREATED

from backoffice.models import Contact, ContactCreate, ContactStats, ErrorResponse
from backoffice.services.contact_service import ContactService
from backoffice_api.dependencies import get_contact_service
from backoffice_api.models import ContactStatusUpdate
from backoffice_api.security import require_admin

router = APIRouter(tags=["contacts"])


def _client_ip(request: Request) -> str | None:
    """First address in X-Forwarded-For, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


@router.post(
    "/contacts",
    summary="Submit contact form",
    description="Stores the message, alerts the admin and confirms receipt to the sender.",
    response_model=Contact,
    status_code=HTTP_201_CREATED,
)
async def submit_contact(
    request: Request,
    body: ContactCreate,
    service: ContactService = Depends(get_contact_service),
) -> Contact:
    return service.submit(
        body,
        ip_address=_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


@router.get(
    "/contacts/stats",
    summary="Contact statistics",
    description="Total submissions, count per status and submissions in the last 7 days.",
    response_model=ContactStats,
)
async def contact_stats(service: ContactService = Depends(get_contact_service)) -> ContactStats:
    return service.contact_stats()


@router.get(
    "/contacts",
    summary="List contact submissions",
    response_model=list[Contact],
    dependencies=[Depends(require_admin)],
)
async def list_contacts(service: ContactService = Depends(get_contact_service)) -> list[Contact]:
    return service.list_contacts()


@router.patch(
    "/contacts/{contact_id}",
    summary="Update contact status",
    description="Marking a submission resolved records the response time.",
    response_model=Contact,
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Contact not found", "model": ErrorResponse}},
)
async def update_contact_status(
    contact_id: str,
    body: ContactStatusUpdate,
    service: ContactService = Depends(get_contact_service),
) -> Contact:
    return service.update_status(contact_id, body.status)
