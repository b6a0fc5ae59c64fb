"""
Return and catalog domain models.

ReturnRecord is one line of a marketplace return export after column mapping.
ProductRecord is one catalog line (the lookup side of matching, never
matched itself). AuthoritativeProduct is a storefront listing used by the
two-catalog matcher.

Records are treated as values: engine functions return updated copies via
``model_copy(update=...)`` and never mutate their inputs.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from returnsync.config import VENDOR_CODE_ABSENT


class ReturnStatus(str, Enum):
    """Lifecycle state of a return record."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class MatchMethod(str, Enum):
    """Which matcher stage linked the record to the catalog.

    Extends str so JSON output carries the plain label.
    """

    BARCODE_EXACT = "barcode exact"
    VENDOR_CODE_EXACT = "vendor code exact"
    PRODUCT_NAME_EXACT = "product name exact"
    NAME_SIMILARITY = "name similarity"
    CODE_TO_NAME_SIMILARITY = "code-to-name similarity"
    WEIGHTED_SIMILARITY = "weighted similarity"
    TWO_CATALOG = "two-catalog"
    MANUAL = "manual"


class ProductRecord(BaseModel):
    """A catalog entry. Barcode is the product identity when present."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    barcode: str = Field(default="")
    product_name: str = Field(default="", alias="productName")
    purchase_name: str = Field(default="", alias="purchaseName")
    option_name: str = Field(default="", alias="optionName")
    vendor_product_code: str = Field(default="", alias="vendorProductCode")
    custom_product_code: str = Field(default="", alias="customProductCode")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @property
    def display_name(self) -> str:
        """Purchase name, falling back to the listing name."""
        return self.purchase_name or self.product_name

    @property
    def has_vendor_code(self) -> bool:
        return bool(self.vendor_product_code) and self.vendor_product_code != VENDOR_CODE_ABSENT


class AuthoritativeProduct(BaseModel):
    """A storefront listing: the authoritative product name for a product code."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_code: str = Field(..., alias="productCode")
    product_name: str = Field(..., alias="productName")
    option_name: str = Field(default="", alias="optionName")
    barcode: str = Field(default="")

    @field_validator("product_code", "product_name", "option_name", "barcode", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> str:
        if v is None:
            return ""
        return str(v).strip()


class ReturnRecord(BaseModel):
    """
    A single return line.

    ``option_name`` keeps the raw export value; ``option_display`` is the
    normalized form shown to operators. A non-empty ``barcode`` means the
    record is already matched.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Identity (supplied by the caller, never generated here)
    record_id: str | None = Field(default=None, alias="id")

    # Import fields
    customer_name: str = Field(default="", alias="customerName")
    order_number: str = Field(..., alias="orderNumber")
    product_name: str = Field(..., alias="productName")
    option_name: str = Field(default="", alias="optionName")
    option_display: str = Field(default="", alias="optionDisplay")
    quantity: int = Field(..., gt=0)
    return_reason_raw: str = Field(default="", alias="returnReasonRaw")
    return_reason_normalized: str = Field(default="", alias="returnReasonNormalized")
    tracking_number: str | None = Field(default=None, alias="trackingNumber")
    vendor_product_code: str | None = Field(default=None, alias="vendorProductCode")
    detail_reason: str | None = Field(default=None, alias="detailReason")

    # Lifecycle
    status: ReturnStatus = Field(default=ReturnStatus.PENDING)
    completed_at: datetime | None = Field(default=None, alias="completedAt")

    # Catalog identity (filled by the matcher)
    barcode: str | None = Field(default=None)
    purchase_name: str | None = Field(default=None, alias="purchaseName")
    matched_product_name: str | None = Field(default=None, alias="matchedProductName")
    matched_option_name: str | None = Field(default=None, alias="matchedOptionName")
    custom_product_code: str | None = Field(default=None, alias="customProductCode")
    match_confidence: float | None = Field(default=None, ge=0.0, le=1.0, alias="matchConfidence")
    match_method: MatchMethod | None = Field(default=None, alias="matchMethod")

    @field_validator("order_number", "product_name")
    @classmethod
    def required_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @property
    def is_matched(self) -> bool:
        return bool(self.barcode)

    @property
    def has_vendor_code(self) -> bool:
        code = self.vendor_product_code
        return bool(code) and code != VENDOR_CODE_ABSENT

    @property
    def is_completed(self) -> bool:
        return self.status == ReturnStatus.COMPLETED
