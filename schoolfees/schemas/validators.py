"""Custom validators and types."""

import re
from typing import Annotated

from pydantic import AfterValidator, BeforeValidator, EmailStr, Field

# Zambian mobile number pattern
# +260 XX YYYYYYY - country code + 2 digit operator prefix (7X or 9X) + 7 digit number
PHONE_PATTERN = re.compile(r"^\+260[79][0-9]{8}$")


def validate_phone_number(value: str) -> str:
    """
    Validate and normalize a Zambian mobile number.

    Accepts formats:
    - +260971234567
    - +260 97 1234567
    - +260 97 123 45 67
    - +260-97-123-45-67

    Returns normalized format: +260971234567
    """
    # Remove spaces, dashes, parentheses
    normalized = re.sub(r"[\s\-\(\)]", "", value)

    if not PHONE_PATTERN.match(normalized):
        raise ValueError(
            "Invalid phone number. Use format: +260 XX YYYYYYY (e.g., +260 97 1234567)"
        )

    return normalized


def _strip(value):
    return value.strip() if isinstance(value, str) else value


# Annotated type for phone number validation
PhoneNumber = Annotated[
    str,
    Field(min_length=9, max_length=20),
    AfterValidator(validate_phone_number),
]

# Syntax and domain checks come from email-validator
Email = Annotated[
    EmailStr,
    BeforeValidator(_strip),
    AfterValidator(str.lower),
]

TermNumber = Annotated[int, Field(ge=1, le=3, description="School term (1-3)")]

Year = Annotated[int, Field(ge=2000, le=2100)]
