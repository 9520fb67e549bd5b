"""Pydantic models describing the Patreon JSON:API payloads we consume."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _none_to_empty(value: object) -> object:
    return {} if value is None else value


class PatreonBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResourceIdentifier(PatreonBaseModel):
    id: str
    type: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value


class ToOneRelationship(PatreonBaseModel):
    data: ResourceIdentifier | None = None


class ToManyRelationship(PatreonBaseModel):
    data: list[ResourceIdentifier] | None = None

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self.data or ())


class ChargeAttributes(PatreonBaseModel):
    last_charge_status: str | None = None
    last_charge_date: str | None = None
    pledge_cadence: int | None = None

    _normalize_blank = field_validator("last_charge_status", "last_charge_date", mode="before")(
        _blank_to_none
    )


class PledgeAttributes(ChargeAttributes):
    amount_cents: int | None = None
    declined_since: str | None = None

    _normalize_declined = field_validator("declined_since", mode="before")(_blank_to_none)


class MemberAttributes(ChargeAttributes):
    # Older webhook payloads say pledge_amount_cents, the v2 listing says
    # currently_entitled_amount_cents.
    pledge_amount_cents: int | None = Field(
        default=None,
        validation_alias=AliasChoices("pledge_amount_cents", "currently_entitled_amount_cents"),
    )
    patron_status: str | None = None


class PledgeRelationships(PatreonBaseModel):
    patron: ToOneRelationship | None = None
    reward: ToOneRelationship | None = None


class MemberRelationships(PatreonBaseModel):
    user: ToOneRelationship | None = None
    currently_entitled_tiers: ToManyRelationship | None = None


class PledgeResource(PatreonBaseModel):
    type: Literal["pledge"]
    id: str | None = None
    attributes: PledgeAttributes = Field(default_factory=PledgeAttributes)
    relationships: PledgeRelationships = Field(default_factory=PledgeRelationships)

    _normalize_sections = field_validator("attributes", "relationships", mode="before")(
        _none_to_empty
    )


class MemberResource(PatreonBaseModel):
    type: Literal["member"]
    id: str | None = None
    attributes: MemberAttributes = Field(default_factory=MemberAttributes)
    relationships: MemberRelationships = Field(default_factory=MemberRelationships)

    _normalize_sections = field_validator("attributes", "relationships", mode="before")(
        _none_to_empty
    )


MembershipResource = Annotated[PledgeResource | MemberResource, Field(discriminator="type")]


class UserAttributes(PatreonBaseModel):
    email: str | None = None
    full_name: str | None = None

    _normalize_email = field_validator("email", mode="before")(_blank_to_none)


class UserResource(PatreonBaseModel):
    type: Literal["user"]
    id: str
    attributes: UserAttributes = Field(default_factory=UserAttributes)

    _normalize_sections = field_validator("attributes", mode="before")(_none_to_empty)

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value


class ErrorObject(PatreonBaseModel):
    status: str | int | None = None
    code: int | str | None = None
    code_name: str | None = None
    title: str | None = None
    detail: str | None = None


class ErrorDocument(PatreonBaseModel):
    errors: list[ErrorObject] = Field(default_factory=list)

    def summary(self) -> str:
        if not self.errors:
            return "unknown error"
        first = self.errors[0]
        return first.detail or first.title or first.code_name or f"status {first.status}"


MEMBERSHIP_TYPES = frozenset({"pledge", "member"})
