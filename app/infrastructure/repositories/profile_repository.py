"""Persistence layer for user profiles."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Contact, Profile
from app.infrastructure.models import NotificationPreferenceModel, ProfileModel


class ProfileRepository:
    """Look up profiles for recipient resolution and contact details."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, profile: Profile) -> Profile:
        model = ProfileModel()
        self._apply_entity_to_model(model, profile)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, user_id: str) -> Profile | None:
        model = self.session.get(ProfileModel, user_id)
        return self._to_entity(model) if model else None

    def list_ids_by_company_roles(
        self, company_id: str, roles: Sequence[str]
    ) -> list[str]:
        """Return active profile ids of ``company_id`` holding any of ``roles``."""

        if not company_id or not roles:
            return []
        query = (
            self.session.query(ProfileModel.id)
            .filter(ProfileModel.company_id == company_id)
            .filter(ProfileModel.role.in_(list(roles)))
            .filter(ProfileModel.is_active.is_(True))
            .order_by(ProfileModel.id.asc())
        )
        return [user_id for (user_id,) in query.all()]

    def get_contact(self, user_id: str) -> Contact | None:
        """Return channel destinations, preferring preference overrides."""

        model = self.session.get(ProfileModel, user_id)
        if model is None:
            return None
        overrides = (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id == user_id)
            .one_or_none()
        )
        email = model.email
        phone = model.phone_number
        if overrides is not None:
            email = overrides.email_address or email
            phone = overrides.phone_number or phone
        return Contact(
            user_id=model.id,
            name=model.name,
            email=email,
            phone=phone,
            push_token=model.push_token,
        )

    @staticmethod
    def _apply_entity_to_model(model: ProfileModel, profile: Profile) -> None:
        model.id = profile.id
        model.name = profile.name
        model.email = profile.email
        model.phone_number = profile.phone_number
        model.push_token = profile.push_token
        model.company_id = profile.company_id
        model.role = profile.role
        model.is_active = profile.is_active

    @staticmethod
    def _to_entity(model: ProfileModel) -> Profile:
        return Profile(
            id=model.id,
            name=model.name,
            email=model.email,
            phone_number=model.phone_number,
            push_token=model.push_token,
            company_id=model.company_id,
            role=model.role,
            is_active=bool(model.is_active),
        )


__all__ = ["ProfileRepository"]
