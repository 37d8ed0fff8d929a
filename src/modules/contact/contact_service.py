import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from src.common.config import settings
from src.common.utils.email_service import Mailer
from src.common.utils.global_messages import GlobalMessages
from src.modules.contact.schemas import ContactFormRequest, Department

logger = logging.getLogger(__name__)

SUBJECT_TAG = "[Contact Form]"

_ERROR_MESSAGES = {
    "missing": GlobalMessages.FIELD_REQUIRED,
    "string_too_short": GlobalMessages.FIELD_EMPTY,
    "string_type": GlobalMessages.INVALID_STRING,
}

_FIELD_MESSAGES = {
    "email": GlobalMessages.INVALID_EMAIL,
    "department": GlobalMessages.INVALID_DEPARTMENT,
}


@dataclass
class ComposedEmail:
    """A contact message ready to hand to the mailer."""
    to: str
    reply_to: str
    subject: str
    text_body: str
    html_body: str


def _field_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    errors = []
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else None
        if field == "captcha_token":
            field = "captchaToken"
        if error["type"] != "missing" and field in _FIELD_MESSAGES:
            message = _FIELD_MESSAGES[field]
        else:
            message = _ERROR_MESSAGES.get(error["type"], error["msg"])
        errors.append({"field": field, "message": message, "type": error["type"]})
    return errors


def validate_submission(
    raw: Mapping[str, Any],
) -> Union[ContactFormRequest, List[Dict[str, Any]]]:
    """
    Validate and sanitize raw contact form fields.

    Returns the normalized submission, or the list of every field error found.
    """
    try:
        return ContactFormRequest.model_validate(dict(raw))
    except ValidationError as e:
        return _field_errors(e)


def resolve_recipient(
    department: Optional[Union[Department, str]],
    department_emails: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the mailbox for a department, falling back to the general one."""
    table = department_emails if department_emails is not None else settings.DEPARTMENT_EMAILS
    key = department.value if isinstance(department, Department) else department
    return table.get(key) or table[Department.GENERAL.value]


def compose_contact_email(form: ContactFormRequest, to: str) -> ComposedEmail:
    department = form.department.value
    html_message = form.message.replace("\n", "<br/>")
    text_body = (
        f"Department: {department}\n"
        f"From: {form.name} <{form.email}>\n\n"
        f"{form.message}"
    )
    html_body = (
        f"<p><strong>Department:</strong> {department}</p>\n"
        f"<p><strong>From:</strong> {form.name} &lt;{form.email}&gt;</p>\n"
        f"<p><strong>Subject:</strong> {form.subject}</p>\n"
        "<hr/>\n"
        f"<p>{html_message}</p>\n"
    )
    return ComposedEmail(
        to=to,
        reply_to=form.email,
        subject=f"{SUBJECT_TAG} {form.subject} - {form.name}",
        text_body=text_body,
        html_body=html_body,
    )


async def process_contact_form(form: ContactFormRequest, mailer: Mailer) -> str:
    """
    Route, compose and send a validated contact form submission.

    Args:
        form (ContactFormRequest): The validated submission.
        mailer (Mailer): Transport used to deliver the message.

    Returns:
        str: The Message-ID of the sent email.
    """
    to = resolve_recipient(form.department)
    email = compose_contact_email(form, to)
    message_id = await mailer.send_email(
        email.subject,
        email.text_body,
        [email.to],
        html_body=email.html_body,
        reply_to=email.reply_to,
    )
    logger.info("Contact message %s sent to %s department", message_id, form.department.value)
    return message_id
