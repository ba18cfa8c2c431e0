"""
application.services.marketplace - Browse and list eco products.

All calls are authenticated and go through SessionManager.authorized_request,
so a rejected token ends the session in one place.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence, Union

from greenhero.domain.entities import Product
from greenhero.domain.exceptions import ApiError, InvalidRequestError
from greenhero.domain.models import Notice
from greenhero.domain.ports import FilePart
from greenhero.application.dto import ProductDraft, parse_form
from greenhero.application.services.session import SessionManager

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class MarketplaceService:
    """Product listing, detail and creation."""

    def __init__(self, session: SessionManager):
        self._session = session

    async def list_products(self) -> list[Product]:
        """Fetch every listing. Accepts ``{"products": [...]}`` or a bare array."""
        response = await self._session.authorized_request("GET", "/products")
        if not response.ok:
            raise ApiError(
                response.message("message", "msg", default="Failed to load products"),
                status=response.status,
                body=response.body,
            )

        body = response.body
        records = body.get("products") if isinstance(body, dict) else body
        if not isinstance(records, list):
            logger.warning("Product list payload has no array; showing none")
            return []
        return list(_decode_products(records))

    async def get_product(self, product_id: str) -> Product:
        """Fetch one listing. Accepts ``{"product": {...}}`` or the bare record."""
        response = await self._session.authorized_request("GET", f"/products/{product_id}")
        if not response.ok:
            raise ApiError(
                response.message("message", "msg", default="Product not found"),
                status=response.status,
                body=response.body,
            )
        record = response.get("product") or response.body
        try:
            return Product.from_dict(record)
        except (TypeError, ValueError) as e:
            raise ApiError(
                f"Unreadable product record: {e}",
                status=response.status,
                body=response.body,
            ) from e

    async def create_product(
        self,
        draft: Union[ProductDraft, Mapping[str, Any]],
        image_paths: Sequence[Union[str, Path]],
    ) -> Notice:
        """Publish a new listing with at least one photo (multipart upload).

        Raises:
            InvalidRequestError: Missing fields, no images, or an unreadable image.
            ApiError:            Backend rejected the listing.
        """
        if not isinstance(draft, ProductDraft):
            draft = parse_form(ProductDraft, draft)
        if not image_paths:
            raise InvalidRequestError(
                "Please fill all required fields and add at least one image."
            )

        response = await self._session.authorized_request(
            "POST", "/products/new-product",
            data=draft.to_form(),
            files=_image_parts(image_paths),
        )
        if not response.ok:
            raise ApiError(
                response.message("message", default="Failed to add product"),
                status=response.status,
                body=response.body,
            )

        logger.info("Listed product %r with %d image(s)", draft.name, len(image_paths))
        return Notice(title="Success", message="Product added to GreenHero!")

    @staticmethod
    def filter_products(
        products: Iterable[Product],
        category: str = ALL_CATEGORIES,
        query: str = "",
    ) -> list[Product]:
        """Keep products in ``category`` whose name contains ``query`` (case-insensitive)."""
        needle = query.lower()
        return [
            p for p in products
            if (category == ALL_CATEGORIES or p.category == category)
            and needle in p.name.lower()
        ]


def _decode_products(records: Iterable[Any]) -> Iterable[Product]:
    for record in records:
        try:
            yield Product.from_dict(record)
        except (TypeError, ValueError) as e:
            logger.warning("Skipping unreadable product record: %s", e)


def _image_parts(paths: Sequence[Union[str, Path]]) -> list[FilePart]:
    parts: list[FilePart] = []
    for index, raw in enumerate(paths):
        path = Path(raw)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise InvalidRequestError(f"Cannot read image {path}: {e}") from e
        ext = path.suffix.lstrip(".").lower() or "jpg"
        parts.append(("images", (f"photo_{index}.{ext}", content, f"image/{ext}")))
    return parts
