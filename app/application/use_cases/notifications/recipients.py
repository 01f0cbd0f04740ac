"""Determine which users must be notified about an event."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, Sequence

from app.domain.entities import COMPANY_ADMIN_ROLES, Recipient

ROLE_WAREHOUSE_OWNER = "warehouse_owner"
ROLE_CUSTOMER = "customer"
ROLE_WAREHOUSE_STAFF = "warehouse_staff"
ROLE_INVITER = "inviter"
ROLE_COMPANY_ADMIN = "company_admin"


class CompanyMembership(Protocol):
    """Lookup of company members by role."""

    def list_ids_by_company_roles(
        self, company_id: str, roles: Sequence[str]
    ) -> list[str]:
        ...


Payload = Mapping[str, Any]
RecipientRule = Callable[[Payload, CompanyMembership | None], list[Recipient]]


def _single(key: str, role: str) -> RecipientRule:
    def rule(payload: Payload, _directory: CompanyMembership | None) -> list[Recipient]:
        user_id = payload.get(key)
        return [Recipient(user_id=str(user_id), role=role)] if user_id else []

    return rule


def _customer_and_staff(
    payload: Payload, directory: CompanyMembership | None
) -> list[Recipient]:
    recipients = _single("customerId", ROLE_CUSTOMER)(payload, directory)
    staff_ids = payload.get("warehouseStaffIds") or []
    if isinstance(staff_ids, (str, bytes)):
        staff_ids = [staff_ids]
    recipients.extend(
        Recipient(user_id=str(staff_id), role=ROLE_WAREHOUSE_STAFF)
        for staff_id in staff_ids
        if staff_id
    )
    return recipients


def _company_admins(
    payload: Payload, directory: CompanyMembership | None
) -> list[Recipient]:
    company_id = payload.get("companyId")
    if not company_id or directory is None:
        return []
    return [
        Recipient(user_id=str(user_id), role=ROLE_COMPANY_ADMIN)
        for user_id in directory.list_ids_by_company_roles(
            str(company_id), COMPANY_ADMIN_ROLES
        )
    ]


_warehouse_owner = _single("warehouseOwnerId", ROLE_WAREHOUSE_OWNER)
_customer = _single("customerId", ROLE_CUSTOMER)

RECIPIENT_RULES: dict[str, RecipientRule] = {
    "booking.requested": _warehouse_owner,
    "booking.proposal.created": _customer,
    "booking.proposal.accepted": _warehouse_owner,
    "booking.proposal.rejected": _warehouse_owner,
    "booking.approved": _customer_and_staff,
    "booking.rejected": _customer,
    "booking.modified": _warehouse_owner,
    "invoice.generated": _customer,
    "invoice.overdue": _customer,
    "invoice.paid": _customer,
    # Below-threshold updates are suppressed later by the content builder.
    "warehouse.occupancy.updated": _warehouse_owner,
    "team.member.invited": _single("invitedBy", ROLE_INVITER),
    "team.member.joined": _company_admins,
}


def resolve_recipients(
    payload: Payload, *, directory: CompanyMembership | None = None
) -> list[Recipient]:
    """Return the recipients of the event described by ``payload``.

    An unknown ``eventType`` or a missing identifier yields an empty list,
    which callers treat as "nobody to notify". Users appearing more than once
    are kept at their first position.
    """

    rule = RECIPIENT_RULES.get(str(payload.get("eventType") or ""))
    if rule is None:
        return []

    recipients: list[Recipient] = []
    seen: set[str] = set()
    for recipient in rule(payload, directory):
        if recipient.user_id in seen:
            continue
        seen.add(recipient.user_id)
        recipients.append(recipient)
    return recipients


__all__ = [
    "CompanyMembership",
    "RECIPIENT_RULES",
    "ROLE_COMPANY_ADMIN",
    "ROLE_CUSTOMER",
    "ROLE_INVITER",
    "ROLE_WAREHOUSE_OWNER",
    "ROLE_WAREHOUSE_STAFF",
    "resolve_recipients",
]
