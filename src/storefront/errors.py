"""Failure taxonomy for the storefront core.

Every core operation either returns its result or raises one of these.
``kind`` is stable and safe to hand to clients; ``client_message`` is the
human readable text a transport may show. Internal causes stay on the
exception (``__cause__``) and in logs, never in ``client_message``.
"""

from protean.exceptions import ValidationError


class StorefrontError(Exception):
    kind = "error"
    client_message = "The request could not be completed"


class NotFound(StorefrontError):
    kind = "not_found"

    def __init__(self, entity: str, identifier) -> None:
        self.entity = entity
        self.identifier = str(identifier)
        super().__init__(f"{entity} not found: {self.identifier}")

    @property
    def client_message(self) -> str:
        return f"{self.entity} not found"


class ValidationFailed(ValidationError, StorefrontError):
    """Missing or out-of-range input. ``messages`` maps field names to error lists."""

    kind = "validation_failed"

    def __init__(self, messages: dict) -> None:
        super().__init__(messages)
        self.messages = messages

    @property
    def client_message(self) -> str:
        parts = []
        for field, errors in self.messages.items():
            parts.append(f"{field}: {'; '.join(str(e) for e in errors)}")
        return ", ".join(parts) or "Invalid request"


class InsufficientStock(StorefrontError):
    kind = "insufficient_stock"

    def __init__(self, product_id, requested: int, available: int) -> None:
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for product {self.product_id}: {available} available, {requested} requested")

    @property
    def client_message(self) -> str:
        return f"Not enough stock: {self.available} available, {self.requested} requested"


class LimitReached(StorefrontError):
    kind = "limit_reached"
    client_message = "Promotion usage limit reached"

    def __init__(self, promotion_id, usage_limit: int) -> None:
        self.promotion_id = str(promotion_id)
        self.usage_limit = usage_limit
        super().__init__(f"Promotion {self.promotion_id} reached its usage limit of {usage_limit}")


class DuplicateReview(StorefrontError):
    kind = "duplicate_review"
    client_message = "You have already reviewed this product"

    def __init__(self, product_id, user_id) -> None:
        self.product_id = str(product_id)
        self.user_id = str(user_id)
        super().__init__(f"User {self.user_id} already reviewed product {self.product_id}")


class Unauthorized(StorefrontError):
    kind = "unauthorized"

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Not authorized to {action}")

    @property
    def client_message(self) -> str:
        return f"Not authorized to {self.action}"


class CompensationFailed(StorefrontError):
    """A reversing step failed after a partial failure; stock accounting needs an operator.

    ``cause`` is the failure that triggered compensation, ``failures`` lists
    ``(description, exception)`` pairs for every reversing step that failed.
    """

    kind = "compensation_failed"
    client_message = "The request failed and could not be fully rolled back"

    def __init__(self, cause: Exception, failures: list) -> None:
        self.cause = cause
        self.failures = failures
        described = ", ".join(description for description, _ in failures)
        super().__init__(f"Compensation failed after {type(cause).__name__}: {described}")


class ProductNotFound(NotFound):
    def __init__(self, product_id) -> None:
        super().__init__("Product", product_id)


class EmptyOrder(ValidationFailed):
    def __init__(self) -> None:
        super().__init__({"line_items": ["No order items"]})
