"""Persistence helpers for notification preferences."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import NotificationPreference
from app.infrastructure.models import NotificationPreferenceModel


class NotificationPreferenceRepository:
    """Read and store :class:`NotificationPreference` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_for_user(self, user_id: str) -> NotificationPreference:
        """Return the stored preferences or the defaults for ``user_id``."""

        model = (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id == user_id)
            .one_or_none()
        )
        if model is None:
            return NotificationPreference(user_id=user_id)
        return self._to_entity(model)

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        model = (
            self.session.query(NotificationPreferenceModel)
            .filter(NotificationPreferenceModel.user_id == preference.user_id)
            .one_or_none()
        )
        if model is None:
            model = NotificationPreferenceModel(user_id=preference.user_id)
        model.email_enabled = preference.email_enabled
        model.sms_enabled = preference.sms_enabled
        model.push_enabled = preference.push_enabled
        model.type_preferences = preference.type_preferences
        model.email_address = preference.email_address
        model.phone_number = preference.phone_number
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        preference = NotificationPreference(
            user_id=model.user_id,
            email_enabled=bool(model.email_enabled),
            sms_enabled=bool(model.sms_enabled),
            push_enabled=bool(model.push_enabled),
            email_address=model.email_address,
            phone_number=model.phone_number,
        )
        if model.type_preferences is not None:
            preference.type_preferences = dict(model.type_preferences)
        return preference


__all__ = ["NotificationPreferenceRepository"]
