"""Promotion aggregate — a discount code shared by many carts.

Because any number of carts can point at one promotion, ``used_count`` is the
one field with real contention: it is only ever changed through the Ledger
Store's conditional update (see ``PricingCalculator.consume_promotion_usage``).
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.domain import storefront
from storefront.errors import LimitReached
from storefront.promotions.events import (
    PromotionCreated,
    PromotionUsageConsumed,
    PromotionUsageReleased,
)


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code):
    return code.strip().upper() if code else code


def _as_utc(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@storefront.aggregate
class Promotion:
    name = String(required=True, max_length=255)
    code = String(required=True, max_length=50)
    discount_type = String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    discount_value = Float(required=True, min_value=0.0)
    starts_at = DateTime(required=True)
    ends_at = DateTime(required=True)
    is_active = Boolean(default=True)
    usage_limit = Integer(min_value=1)  # None means unlimited
    used_count = Integer(default=0, min_value=0)
    product_ids = Text()  # JSON array; empty means every product qualifies
    created_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def validity_window_must_be_ordered(self):
        if self.starts_at and self.ends_at and _as_utc(self.ends_at) <= _as_utc(self.starts_at):
            raise ValidationError({"ends_at": ["End date must be after start date"]})

    @invariant.post
    def used_count_cannot_exceed_limit(self):
        if self.usage_limit is not None and self.used_count is not None and self.used_count > self.usage_limit:
            raise ValidationError({"used_count": ["Usage count cannot exceed the usage limit"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.discount_value or 0) > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        name,
        code,
        discount_value,
        starts_at,
        ends_at,
        discount_type=DiscountType.PERCENTAGE.value,
        usage_limit=None,
        product_ids=None,
        is_active=True,
    ):
        now = datetime.now(UTC)
        promotion = cls(
            name=name,
            code=normalize_code(code),
            discount_type=discount_type,
            discount_value=discount_value,
            starts_at=starts_at,
            ends_at=ends_at,
            is_active=is_active,
            usage_limit=usage_limit,
            used_count=0,
            product_ids=json.dumps([str(pid) for pid in product_ids]) if product_ids else None,
            created_at=now,
        )
        promotion.raise_(
            PromotionCreated(
                promotion_id=str(promotion.id),
                code=promotion.code,
                discount_type=promotion.discount_type,
                created_at=now,
            )
        )
        return promotion

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def restricted_product_ids(self) -> set[str]:
        return set(json.loads(self.product_ids)) if self.product_ids else set()

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    def is_within_window(self, at) -> bool:
        at = _as_utc(at)
        return _as_utc(self.starts_at) <= at <= _as_utc(self.ends_at)

    def is_redeemable(self, at) -> bool:
        """Active, inside its validity window, and not used up."""
        return bool(self.is_active) and self.is_within_window(at) and not self.is_exhausted

    # -------------------------------------------------------------------
    # Usage
    # -------------------------------------------------------------------
    def consume_usage(self):
        if self.is_exhausted:
            raise LimitReached(self.id, self.usage_limit)

        now = datetime.now(UTC)
        self.used_count = self.used_count + 1

        self.raise_(
            PromotionUsageConsumed(
                promotion_id=str(self.id),
                used_count=self.used_count,
                usage_limit=self.usage_limit,
                consumed_at=now,
            )
        )

    def release_usage(self):
        if not self.used_count:
            return

        self.used_count = self.used_count - 1
        self.raise_(
            PromotionUsageReleased(
                promotion_id=str(self.id),
                used_count=self.used_count,
                released_at=datetime.now(UTC),
            )
        )
