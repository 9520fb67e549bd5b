"""Translate Patreon JSON:API resources into domain entries."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from pledgesync.domain.errors import MalformedEntryError
from pledgesync.domain.model import Charge, MemberEntry, PledgeEntry

from .schema import (
    MEMBERSHIP_TYPES,
    ChargeAttributes,
    MemberResource,
    MembershipResource,
    PledgeResource,
    UserResource,
)

if TYPE_CHECKING:
    from pledgesync.domain.model import MembershipEntry

_MEMBERSHIP_ADAPTER: TypeAdapter[PledgeResource | MemberResource] = TypeAdapter(MembershipResource)


def parse_entry(raw: object) -> MembershipEntry | None:
    """Translate one ``data`` object into a pledge or member entry.

    Returns ``None`` for resource types that carry no membership facts and raises
    :class:`MalformedEntryError` when a membership resource cannot name its patron.
    """

    if not isinstance(raw, Mapping):
        raise MalformedEntryError(f"Expected a resource object, got {type(raw).__name__}")
    if raw.get("type") not in MEMBERSHIP_TYPES:
        return None

    try:
        resource = _MEMBERSHIP_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise MalformedEntryError(f"Invalid {raw.get('type')} resource: {exc}") from exc

    if isinstance(resource, PledgeResource):
        return _pledge_entry(resource)
    return _member_entry(resource)


def parse_user_email(raw: object) -> tuple[str, str] | None:
    """Return ``(user_id, lowercased email)`` for an included user with an email."""

    if not isinstance(raw, Mapping) or raw.get("type") != "user":
        return None
    try:
        user = UserResource.model_validate(raw)
    except ValidationError:
        return None
    if user.attributes.email is None:
        return None
    return user.id, user.attributes.email.lower()


def _pledge_entry(resource: PledgeResource) -> PledgeEntry:
    patron = resource.relationships.patron
    if patron is None or patron.data is None:
        raise MalformedEntryError(f"Pledge {resource.id or '<unknown>'} has no patron")

    reward = resource.relationships.reward
    attributes = resource.attributes
    return PledgeEntry(
        patron_id=patron.data.id,
        amount_cents=attributes.amount_cents,
        reward_id=reward.data.id if reward is not None and reward.data is not None else None,
        declined_since=attributes.declined_since,
        charge=_charge(attributes),
    )


def _member_entry(resource: MemberResource) -> MemberEntry:
    user = resource.relationships.user
    if user is None or user.data is None:
        raise MalformedEntryError(f"Member {resource.id or '<unknown>'} has no user")

    tiers = resource.relationships.currently_entitled_tiers
    return MemberEntry(
        patron_id=user.data.id,
        amount_cents=resource.attributes.pledge_amount_cents,
        tier_ids=tiers.ids if tiers is not None else (),
        charge=_charge(resource.attributes),
    )


def _charge(attributes: ChargeAttributes) -> Charge:
    cadence = attributes.pledge_cadence
    return Charge(
        status=attributes.last_charge_status,
        date=attributes.last_charge_date,
        cadence_months=cadence if cadence and cadence > 0 else 1,
    )
