from __future__ import annotations

"""Inbound term payloads (pydantic).

The session manager receives offers as loose JSON. These models validate the
shape per negotiation kind before anything reaches an evaluator; the
``kind`` field discriminates the union.
"""

from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import NEGOTIATION_BAD_PAYLOAD, NEGOTIATION_TERMS_MISMATCH, NegotiationError
from .types import (
    DriverTerms,
    NegotiationKind,
    NegotiationTerms,
    SponsorTerms,
    StaffTerms,
    SupplyTerms,
)


class _TermsPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    duration: int = Field(ge=1)


class DriverTermsPayload(_TermsPayload):
    kind: Literal["DRIVER"] = "DRIVER"
    salary: float = Field(ge=0)

    def to_terms(self) -> DriverTerms:
        return DriverTerms(salary=float(self.salary), duration=int(self.duration))


class StaffTermsPayload(_TermsPayload):
    kind: Literal["STAFF"] = "STAFF"
    salary: float = Field(ge=0)
    signing_bonus: float = Field(default=0.0, ge=0)
    bonus_percent: float = Field(default=0.0, ge=0, le=100)
    buyout_required: float = Field(default=0.0, ge=0)

    def to_terms(self) -> StaffTerms:
        return StaffTerms(
            salary=float(self.salary),
            duration=int(self.duration),
            signing_bonus=float(self.signing_bonus),
            bonus_percent=float(self.bonus_percent),
            buyout_required=float(self.buyout_required),
        )


class SponsorTermsPayload(_TermsPayload):
    kind: Literal["SPONSOR"] = "SPONSOR"
    annual_payment: float = Field(ge=0)
    placement: Literal["PRIMARY", "SECONDARY", "TERTIARY"] = "TERTIARY"
    points_bonus: float = Field(default=0.0, ge=0)
    win_bonus: float = Field(default=0.0, ge=0)
    exit_clause_position: Optional[int] = Field(default=None, ge=1)

    def to_terms(self) -> SponsorTerms:
        return SponsorTerms(
            annual_payment=float(self.annual_payment),
            duration=int(self.duration),
            placement=self.placement,
            points_bonus=float(self.points_bonus),
            win_bonus=float(self.win_bonus),
            exit_clause_position=self.exit_clause_position,
        )


class SupplyTermsPayload(_TermsPayload):
    kind: Literal["MANUFACTURER"] = "MANUFACTURER"
    annual_cost: float = Field(ge=0)
    upgrades_included: int = Field(default=0, ge=0)
    customisation_points_included: int = Field(default=0, ge=0)
    optimisation_included: bool = False

    def to_terms(self) -> SupplyTerms:
        return SupplyTerms(
            annual_cost=float(self.annual_cost),
            duration=int(self.duration),
            upgrades_included=int(self.upgrades_included),
            customisation_points_included=int(self.customisation_points_included),
            optimisation_included=bool(self.optimisation_included),
        )


TermsPayload = Annotated[
    Union[DriverTermsPayload, StaffTermsPayload, SponsorTermsPayload, SupplyTermsPayload],
    Field(discriminator="kind"),
]

_TERMS_ADAPTER: TypeAdapter[Any] = TypeAdapter(TermsPayload)


def parse_terms(payload: Mapping[str, Any], expected_kind: Optional[NegotiationKind] = None) -> NegotiationTerms:
    """Validate a raw payload into terms.

    A payload without ``kind`` takes ``expected_kind``; a payload whose kind
    disagrees with ``expected_kind`` is a mismatch, not a bad payload.
    """
    if not isinstance(payload, Mapping):
        raise NegotiationError(NEGOTIATION_BAD_PAYLOAD, "Terms payload must be an object", {"payload": payload})

    data = dict(payload)
    if "kind" not in data and expected_kind is not None:
        data["kind"] = expected_kind

    try:
        model = _TERMS_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise NegotiationError(
            NEGOTIATION_BAD_PAYLOAD,
            "Invalid terms payload",
            {"errors": exc.errors(include_url=False)},
        ) from exc

    if expected_kind is not None and model.kind != expected_kind:
        raise NegotiationError(
            NEGOTIATION_TERMS_MISMATCH,
            "Terms payload does not match the negotiation kind",
            {"expected": expected_kind, "got": model.kind},
        )
    return model.to_terms()
