# src/modules/contact/schemas.py

from enum import Enum
from typing import List, Optional

from markupsafe import escape
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

GMAIL_DOMAINS = ("gmail.com", "googlemail.com")
OUTLOOK_DOMAINS = (
    "hotmail.com", "hotmail.co.uk", "hotmail.fr", "hotmail.de", "hotmail.it",
    "live.com", "live.co.uk", "live.fr", "msn.com", "outlook.com", "outlook.co.uk",
    "outlook.fr", "outlook.de", "passport.com",
)
YAHOO_DOMAINS = (
    "rocketmail.com", "yahoo.ca", "yahoo.co.uk", "yahoo.com", "yahoo.de",
    "yahoo.fr", "yahoo.in", "yahoo.it", "ymail.com",
)
ICLOUD_DOMAINS = ("icloud.com", "me.com")


class Department(str, Enum):
    TECHNICAL = "technical"
    ADMIN = "admin"
    GENERAL = "general"
    INFO = "info"


def normalize_email(address: str) -> str:
    """
    Lower-case an address and drop the subaddress of well-known providers.

    Gmail ignores dots and "+tag" suffixes, so "John.Doe+web@googlemail.com"
    becomes "johndoe@gmail.com". Outlook and iCloud drop "+tag", Yahoo drops
    the last "-tag".

    Raises:
        ValueError: If nothing is left of the mailbox name.
    """
    local, _, domain = address.rpartition("@")
    local = local.lower()
    domain = domain.lower()
    if domain in GMAIL_DOMAINS:
        local = local.split("+", 1)[0].replace(".", "")
        domain = "gmail.com"
    elif domain in OUTLOOK_DOMAINS or domain in ICLOUD_DOMAINS:
        local = local.split("+", 1)[0]
    elif domain in YAHOO_DOMAINS and "-" in local:
        local = local.rsplit("-", 1)[0]
    if not local:
        raise ValueError("email address has an empty mailbox name")
    return f"{local}@{domain}"


class ContactFormRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    department: Department
    subject: str = Field(min_length=1)
    message: str = Field(min_length=1)
    captcha_token: Optional[str] = Field(default=None, alias="captchaToken")

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    @field_validator("email", mode="before")
    def strip_email(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("email")
    def canonical_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("name", "subject")
    def single_line(cls, value: str) -> str:
        # These end up in the Subject header
        return " ".join(value.split())

    @field_validator("name", "subject", "message")
    def escape_html(cls, value: str) -> str:
        return str(escape(value))


class FieldError(BaseModel):
    field: Optional[str] = None
    message: str
    type: str


class ValidationErrorResponse(BaseModel):
    errors: List[FieldError]


class ContactFormResponse(BaseModel):
    ok: bool = True
    messageId: str


class ErrorResponse(BaseModel):
    error: str
