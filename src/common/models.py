"""
User record models.

Following the storage contract:
- User is what lives in the backing file
- UserCreate is what callers supply (id is store-assigned)
- UserUpdate is a partial UserCreate; only supplied fields change
"""

from typing import Annotated, Any, Dict, Optional

import email_validator
from pydantic import AfterValidator, BaseModel, Field, WithJsonSchema

# Any syntactically valid address is accepted, including .local/.test hosts;
# the domain must still contain a dot and end in a letter.
email_validator.SPECIAL_USE_DOMAIN_NAMES.clear()


def check_email(value: str) -> str:
    """Check address syntax and return the text exactly as given."""
    if "<" in value or ">" in value:
        raise ValueError("value is not a valid email address: display names are not allowed")
    try:
        email_validator.validate_email(
            value, check_deliverability=False, allow_display_name=False
        )
    except email_validator.EmailNotValidError as e:
        raise ValueError(f"value is not a valid email address: {e}") from e
    return value


EmailText = Annotated[
    str,
    AfterValidator(check_email),
    WithJsonSchema({"type": "string", "format": "email"}),
]


class UserCreate(BaseModel):
    """Fields a caller supplies when creating a user."""

    name: str = Field(..., min_length=1, description="Full name")
    email: EmailText = Field(..., description="Email address")
    address: str = Field(..., min_length=1, description="Postal address")
    phone: str = Field(..., min_length=1, description="Phone number")


class User(UserCreate):
    """A stored user record."""

    id: int = Field(..., gt=0, description="Store-assigned identifier")

    def to_record(self) -> Dict[str, Any]:
        """Serialize in storage field order."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "phone": self.phone,
        }


class UserUpdate(BaseModel):
    """Partial update; absent or null fields are left untouched."""

    name: Optional[str] = Field(default=None, min_length=1, description="Full name")
    email: Optional[EmailText] = Field(default=None, description="Email address")
    address: Optional[str] = Field(default=None, min_length=1, description="Postal address")
    phone: Optional[str] = Field(default=None, min_length=1, description="Phone number")

    def changes(self) -> Dict[str, Any]:
        """Fields that were actually supplied."""
        return self.model_dump(exclude_unset=True, exclude_none=True)
