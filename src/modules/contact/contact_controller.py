# src/modules/contact/contact_controller.py

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from slowapi.util import get_remote_address

from src.common.rate_limit import CONTACT_LIMIT, limiter
from src.common.utils.email_service import Mailer, get_mailer
from src.common.utils.global_messages import GlobalMessages
from src.modules.contact import contact_service, schemas
from src.modules.contact.captcha_service import RecaptchaVerifier, get_captcha_verifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["contact"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_form_data(request: Request) -> Optional[Dict[str, Any]]:
    """Return the submitted fields from a JSON or form body, or None if unreadable."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form)
    try:
        data = await request.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


@router.post(
    "",
    response_model=schemas.ContactFormResponse,
    responses={
        400: {"model": schemas.ValidationErrorResponse},
        429: {"model": schemas.ErrorResponse},
        500: {"model": schemas.ErrorResponse},
    },
)
@router.post("/", include_in_schema=False)
@limiter.limit(CONTACT_LIMIT)
async def submit_contact_form(
    request: Request,
    verifier: RecaptchaVerifier = Depends(get_captcha_verifier),
    mailer: Mailer = Depends(get_mailer),
):
    """
    Process a contact form submission.
    Accepts JSON or form-encoded bodies, verifies the captcha token and emails
    the message to the selected department.
    """
    raw = await read_form_data(request)
    if raw is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": [{"field": None, "message": GlobalMessages.MALFORMED_BODY, "type": "malformed_body"}]},
        )

    form = contact_service.validate_submission(raw)
    if isinstance(form, list):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": form})

    try:
        captcha = await verifier.verify(form.captcha_token, remote_ip=get_remote_address(request))
        if not captcha.success:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": GlobalMessages.CAPTCHA_FAILED},
            )

        message_id = await contact_service.process_contact_form(form, mailer)
    except Exception:
        logger.exception("Contact send error")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": GlobalMessages.SEND_FAILED},
        )

    return schemas.ContactFormResponse(messageId=message_id)
