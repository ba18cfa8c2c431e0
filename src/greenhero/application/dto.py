"""
application.dto - Validated request records, one per endpoint.

Loose form dictionaries from adapters are mapped onto these models before
any request is built: unknown keys and missing required fields are
rejected locally instead of being shipped to the backend.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from greenhero.domain.exceptions import InvalidRequestError

MARKETPLACE_CATEGORIES = (
    "organic-seeds",
    "eco-fertilizers",
    "solar-energy",
    "water-saving",
    "recycled-tools",
    "bio-pesticides",
)

_Model = TypeVar("_Model", bound=BaseModel)


class _Body(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class _CredentialBody(BaseModel):
    # Passwords are sent exactly as typed
    model_config = ConfigDict(extra="forbid")


class LoginCredentials(_CredentialBody):
    """Body of POST /auth/login. Emptiness is the caller's concern."""
    email: str
    password: str


class SignupForm(_CredentialBody):
    """Body of POST /auth/signup."""
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str
    password: str = Field(..., min_length=6)
    phone_number: str = ""
    age: Optional[int] = Field(default=None, ge=0)
    # Checked locally, never sent
    confirm_password: Optional[str] = Field(default=None, exclude=True)

    @field_validator("first_name", "last_name", "email", "phone_number", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def email_has_at(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Enter a valid email address")
        return v

    @field_validator("password")
    @classmethod
    def password_has_capital(cls, v: str) -> str:
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password needs at least one capital letter")
        return v

    @model_validator(mode="after")
    def passwords_match(self) -> SignupForm:
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PasswordResetRequest(_Body):
    """Body of POST /auth/forgot-password."""
    email: str


class ProfileUpdate(_Body):
    """Body of PUT /users/:id. Name and email cannot be blanked."""
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    phone_number: str = ""
    bio: str = ""
    location: str = ""
    profile_image_url: str = ""
    profile_background_image_url: str = ""


class ProductDraft(_Body):
    """Text fields of the multipart POST /products/new-product."""
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    stock_quantity: int = Field(default=0, ge=0)
    unit: str = Field(..., min_length=1)

    def to_form(self) -> dict[str, str]:
        """Multipart fields are strings on the wire."""
        return {
            "name": self.name,
            "description": self.description,
            "price": f"{self.price:g}",
            "category": self.category,
            "stock_quantity": str(self.stock_quantity),
            "unit": self.unit,
        }


def parse_form(model: type[_Model], data: Mapping[str, Any]) -> _Model:
    """Validate ``data`` into ``model``, raising InvalidRequestError on failure.

    Only the first problem is reported, which is what a form shows.
    """
    try:
        return model.model_validate(dict(data))
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ()))
        reason = first.get("msg", "invalid value")
        if reason.startswith("Value error, "):
            reason = reason[len("Value error, "):]
        raise InvalidRequestError(f"{where}: {reason}" if where else reason) from exc
