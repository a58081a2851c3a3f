"""Promotion registration and lookup by code."""

import structlog
from protean.exceptions import ValidationError

from storefront.errors import NotFound, ValidationFailed
from storefront.ledger import LedgerStore
from storefront.ledger.store import as_validation_failure
from storefront.promotions.promotion import Promotion, normalize_code

logger = structlog.get_logger(__name__)


class PromotionCatalog:
    def __init__(self, store: LedgerStore) -> None:
        self._store = store

    def create(self, **fields) -> Promotion:
        """Register a promotion. Codes are unique, compared case-insensitively."""
        code = normalize_code(fields.get("code"))
        with self._store.exclusive(Promotion, f"code:{code}"):
            if code and self._store.find_one(Promotion, code=code) is not None:
                raise ValidationFailed({"code": [f"Promotion code {code} already exists"]})
            try:
                promotion = Promotion.create(**fields)
            except ValidationError as exc:
                raise as_validation_failure(exc) from exc
            self._store.add(promotion)

        logger.info("Promotion created", promotion_id=str(promotion.id), code=promotion.code)
        return promotion

    def by_code(self, code) -> Promotion:
        promotion = self._store.find_one(Promotion, code=normalize_code(code))
        if promotion is None:
            raise NotFound("Promotion", code)
        return promotion
