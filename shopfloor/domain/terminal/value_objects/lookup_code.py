"""Identifiers for job operations and scanned route cards."""

from pydantic import field_validator

from shopfloor.domain.shared.base import ValueObject


class ScanCode(ValueObject):
    """
    Raw barcode value read at a terminal.

    A scan is either a bare route card ("12345") or a route card followed by
    its contract number ("12345-C900"). Route cards are kept as text so that
    non-numeric cards resolve the same way as numeric ones.
    """

    raw: str

    @field_validator("raw")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("scan cannot be empty")
        return v

    @property
    def route_card(self) -> str:
        return self.raw.split("-", 1)[0].strip()

    @property
    def contract_number(self) -> str | None:
        parts = self.raw.split("-", 1)
        if len(parts) == 2 and parts[1].strip():
            return parts[1].strip()
        return None

    @property
    def is_composite(self) -> bool:
        return self.contract_number is not None


class LookupCode(ValueObject):
    """Composite key route_card-contract_number-op_code for one job operation."""

    route_card: str
    contract_number: str
    op_code: str

    def __str__(self) -> str:
        return f"{self.route_card}-{self.contract_number}-{self.op_code}"

    @classmethod
    def for_scan(cls, scan: ScanCode, op_code: str) -> str:
        return f"{scan.raw}-{op_code}"
