"""Validated input structs for the core operations.

These are the external contracts of the core: a transport builds one of
these from its request body and hands it over. Unknown keys are rejected, so
a malformed body fails here with ValidationFailed instead of reaching an
aggregate half-parsed.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from storefront.errors import ValidationFailed


class Schema(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class LineItem(Schema):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class ShippingAddress(Schema):
    street: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str | None = Field(default=None, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)


class OrderCharges(Schema):
    shipping_address: ShippingAddress | None = None
    payment_method: str | None = Field(default=None, max_length=50)
    shipping_price: float = Field(default=0.0, ge=0)
    tax_price: float = Field(default=0.0, ge=0)


class PlaceOrder(OrderCharges):
    # Emptiness is reported by the coordinator as EmptyOrder
    line_items: list[LineItem]
    promotion_id: str | None = None


class Checkout(OrderCharges):
    """Charges for converting the caller's cart into an order."""


class PaymentResult(Schema):
    payment_id: str = Field(min_length=1, max_length=255)
    status: str = Field(min_length=1, max_length=50)
    email_address: str | None = Field(default=None, max_length=255)
    update_time: datetime | None = None


# ---------------------------------------------------------------------------
# Carts
# ---------------------------------------------------------------------------
class AddCartItem(Schema):
    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class ReviewDraft(Schema):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(default="", max_length=2000)


class ReviewChanges(Schema):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)


def parse(schema_cls, data):
    """Coerce ``data`` (a dict or an instance) into ``schema_cls`` or raise ValidationFailed."""
    if isinstance(data, schema_cls):
        return data

    try:
        return schema_cls.model_validate(data)
    except SchemaError as exc:
        messages: dict[str, list[str]] = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__root__"
            messages.setdefault(field, []).append(error["msg"])
        raise ValidationFailed(messages) from exc
