"""Store data model."""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..core.enums import AmountType, RateType

DEFAULT_LOGO = "default-logo.png"

_LEADING_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")


class Store(BaseModel):
    """A store record as returned by the collection endpoint.

    Only `id` is required. Irregular display and cashback columns decode to
    fallbacks so one bad record does not fail the whole page.
    """

    id: int | str
    name: str = ""
    logo: str | None = None
    url: str | None = None
    cashback_enabled: bool = False
    cashback_amount: Decimal = Field(default=Decimal("0"), ge=0)
    rate_type: RateType = RateType.FLAT
    amount_type: AmountType = AmountType.PERCENT
    is_promoted: bool = False
    is_sharable: bool = False
    clicks: int = Field(default=0, ge=0)
    published_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="ignore")

    @field_validator("cashback_enabled", "is_promoted", "is_sharable", mode="before")
    @classmethod
    def coerce_flag(cls, v: object) -> object:
        """Accept the 0/1 integers the endpoint stores flags as."""
        if v is None:
            return False
        if v in (0, 1, "0", "1"):
            return bool(int(v))
        return v

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("cashback_amount", mode="before")
    @classmethod
    def parse_amount(cls, v: object) -> Decimal:
        """Parse like the listing card did: leading number or 0, never negative."""
        if isinstance(v, bool) or v is None:
            return Decimal("0")
        if isinstance(v, (int, float, Decimal)):
            amount = Decimal(str(v))
        else:
            match = _LEADING_NUMBER.match(str(v))
            if not match:
                return Decimal("0")
            try:
                amount = Decimal(match.group(0).strip())
            except InvalidOperation:
                return Decimal("0")
        if not amount.is_finite() or amount < 0:
            return Decimal("0")
        return amount

    @field_validator("rate_type", "amount_type", mode="before")
    @classmethod
    def known_or_default(cls, v: object, info: ValidationInfo) -> object:
        enum = RateType if info.field_name == "rate_type" else AmountType
        if isinstance(v, str) and v.strip().lower() in {m.value for m in enum}:
            return v.strip().lower()
        return cls.model_fields[info.field_name].default

    @field_validator("clicks", mode="before")
    @classmethod
    def coerce_clicks(cls, v: object) -> object:
        return 0 if v is None or v == "" else v

    @property
    def logo_url(self) -> str:
        return self.logo or DEFAULT_LOGO

    @property
    def cashback_label(self) -> str:
        """Human-readable cashback offer, e.g. "Upto 5.00% cashback"."""
        if not self.cashback_enabled:
            return "No cashback available"
        amount = f"{self.cashback_amount:.2f}"
        prefix = "Upto" if self.rate_type == RateType.UPTO else "Flat"
        display = f"${amount}" if self.amount_type == AmountType.FIXED else f"{amount}%"
        return f"{prefix} {display} cashback"
