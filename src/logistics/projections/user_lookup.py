"""User lookup — find a user id by email address."""

from protean.core.projector import on
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from logistics.domain import logistics
from logistics.user.events import UserRegistered
from logistics.user.user import User


@logistics.projection
class UserLookup:
    email = Identifier(identifier=True, required=True)
    user_id = String(required=True)
    role = String(required=True)


@logistics.projector(projector_for=UserLookup, aggregates=[User])
class UserLookupProjector:
    @on(UserRegistered)
    def on_user_registered(self, event):
        current_domain.repository_for(UserLookup).add(
            UserLookup(
                email=event.email,
                user_id=event.user_id,
                role=event.role,
            )
        )
