"""EmailAddress value object — the login identity of a platform user."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from logistics.domain import logistics

_LOCAL_PART = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~.-]+$")
_DOMAIN_LABEL = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")


@logistics.value_object
class EmailAddress:
    """A syntactically valid email address.

    Stored lower-cased by the factories that build it, so that uniqueness
    checks in the user directory are case-insensitive.
    """

    address = String(required=True, max_length=254)

    @invariant.post
    def address_is_well_formed(self):
        email = self.address or ""
        local, sep, domain = email.partition("@")

        if not sep or "@" in domain:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
        if not _LOCAL_PART.match(local) or local.startswith(".") or local.endswith(".") or ".." in local:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

        labels = domain.split(".")
        if len(labels) < 2 or not all(_DOMAIN_LABEL.match(label) for label in labels):
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
