"""
Pydantic models for dividend statement data and extraction templates.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from ..core.normalize import parse_numeral, to_cents


CENT = Decimal("0.01")

CURRENCY_FIELDS = (
    "total_payment",
    "franking_credit",
    "unfranked_amount",
    "franked_amount",
    "withholding_tax",
    "cost_of_shares_allotted",
)
INTEGER_FIELDS = ("shares_allotted", "total_shares")

# Labels that carry a numeral nobody wants; binding one discards the value.
OTHER_FIELD = "other"

LABEL_FIELDS = CURRENCY_FIELDS + INTEGER_FIELDS + (OTHER_FIELD,)


class Dollar(BaseModel):
    """Exact cent amount with an explicit presence flag."""
    model_config = ConfigDict(frozen=True)

    cents: int = 0
    has_value: bool = False

    @classmethod
    def from_amount(cls, amount: Any) -> "Dollar":
        """
        Build a present amount, rounding half-up to whole cents.

        Args:
            amount: Decimal, int, float or numeric string

        Returns:
            Dollar with has_value set
        """
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        return cls(cents=to_cents(amount), has_value=True)

    @property
    def amount(self) -> Optional[Decimal]:
        """Amount in dollars, or None when absent."""
        if not self.has_value:
            return None
        return (Decimal(self.cents) / 100).quantize(CENT)

    @model_serializer
    def _serialize(self) -> Optional[Decimal]:
        return self.amount


class Statement(BaseModel):
    """Facts extracted from one dividend statement."""
    entity: Optional[str] = None
    asx_code: Optional[str] = None
    account_holders: List[str] = Field(default_factory=list)
    payment_date: Optional[date] = None
    total_payment: Dollar = Field(default_factory=Dollar)
    franking_credit: Dollar = Field(default_factory=Dollar)
    unfranked_amount: Dollar = Field(default_factory=Dollar)
    franked_amount: Dollar = Field(default_factory=Dollar)
    withholding_tax: Dollar = Field(default_factory=Dollar)
    shares_allotted: Optional[int] = None
    cost_of_shares_allotted: Dollar = Field(default_factory=Dollar)
    total_shares: Optional[int] = None

    @field_validator(*CURRENCY_FIELDS, mode="before")
    @classmethod
    def coerce_dollar(cls, v):
        """Accept the serialized forms of Dollar (null, "36.00", 36.0)."""
        if v is None:
            return Dollar()
        if isinstance(v, (Dollar, dict)):
            return v
        if isinstance(v, bool):
            raise ValueError(f"Not an amount: {v!r}")
        if isinstance(v, str):
            amount = parse_numeral(v)
            if amount is None:
                raise ValueError(f"Not an amount: {v!r}")
            return Dollar.from_amount(amount)
        return Dollar.from_amount(v)

    def has_value(self, field: str) -> bool:
        """Whether a label field has already been bound."""
        if field in CURRENCY_FIELDS:
            return getattr(self, field).has_value
        if field in INTEGER_FIELDS:
            return getattr(self, field) is not None
        return False

    def bind(self, field: str, value: Decimal) -> None:
        """
        Store a numeral against a label field.

        Args:
            field: Field identifier from the label table
            value: Parsed numeral
        """
        if field in CURRENCY_FIELDS:
            setattr(self, field, Dollar.from_amount(value))
        elif field in INTEGER_FIELDS:
            setattr(self, field, int(value))
        elif field != OTHER_FIELD:
            raise ValueError(f"Unknown statement field: {field}")


class StatementTemplate(BaseModel):
    """Extraction template loaded from YAML."""
    template_id: str
    description: str = ""
    labels: Dict[str, List[str]]
    numeral_window: int = 5
    lookahead_sentences: int = 5
    date_format: str = "%d %B %Y"
    date_triggers: List[str] = Field(
        default_factory=lambda: ["payment date", "holder reference number"]
    )
    entity_prefix: str = "ABN"
    code_prefix: str = "asx code: "

    @field_validator('labels')
    @classmethod
    def validate_label_fields(cls, v):
        """Every label must point at a numeric statement field or the other sink."""
        unknown = sorted(set(v) - set(LABEL_FIELDS))
        if unknown:
            raise ValueError(f"Unknown label fields: {', '.join(unknown)}")
        return v

    @field_validator('numeral_window', 'lookahead_sentences')
    @classmethod
    def validate_positive(cls, v):
        if v < 1:
            raise ValueError(f"Must be at least 1: {v}")
        return v
