"""PhoneNumber value object for user and recipient contact numbers."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from logistics.domain import logistics

_ALLOWED = re.compile(r"^\+?[\d\s\-()]+$")
_MIN_DIGITS = 6


@logistics.value_object
class PhoneNumber:
    """A dialable phone number: digits with optional separators and a leading +."""

    number = String(required=True, max_length=20)

    @invariant.post
    def number_is_dialable(self):
        number = self.number or ""
        if not _ALLOWED.match(number):
            raise ValidationError({"phone": [f"Invalid phone number: {number!r}"]})
        if sum(ch.isdigit() for ch in number) < _MIN_DIGITS:
            raise ValidationError({"phone": [f"Phone number needs at least {_MIN_DIGITS} digits: {number!r}"]})


def is_dialable(number: str) -> bool:
    """Check a raw phone string without building a value object."""
    return bool(_ALLOWED.match(number)) and sum(ch.isdigit() for ch in number) >= _MIN_DIGITS
