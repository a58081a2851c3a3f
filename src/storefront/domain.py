"""Storefront bounded context — stock, orders, carts, promotions and reviews.

A single Protean domain owns every aggregate that takes part in checkout, so
the Ledger Store can reach all of them through one set of repositories.
"""

from protean.domain import Domain

storefront = Domain(name="storefront")
