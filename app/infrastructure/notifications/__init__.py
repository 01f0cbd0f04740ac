"""Notification delivery helpers for the infrastructure layer."""

from .base import ChannelProvider, describe_exception
from .directory import (
    ContactDirectory,
    NotificationRecorder,
    SessionFactory,
    SqlAlchemyContactDirectory,
    SqlAlchemyNotificationRecorder,
)
from .dispatcher import NotificationDispatcher
from .email import SendGridEmailProvider
from .factory import build_dispatcher, build_providers
from .push import PushGatewayProvider
from .sms import (
    NetGSMProvider,
    TwilioSMSProvider,
    create_sms_provider,
    format_netgsm_phone_number,
)

__all__ = [
    "ChannelProvider",
    "describe_exception",
    "ContactDirectory",
    "NotificationRecorder",
    "SessionFactory",
    "SqlAlchemyContactDirectory",
    "SqlAlchemyNotificationRecorder",
    "NotificationDispatcher",
    "SendGridEmailProvider",
    "build_dispatcher",
    "build_providers",
    "PushGatewayProvider",
    "NetGSMProvider",
    "TwilioSMSProvider",
    "create_sms_provider",
    "format_netgsm_phone_number",
]
