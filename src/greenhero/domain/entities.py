"""
domain.entities - Server-side records as seen by the client (have IDs).

The backend is document-based, so identifiers arrive as ``_id`` strings.
Each entity keeps unknown keys in ``extra`` so a record read from the
server can be written back (e.g. persisted) without losing fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


@dataclass
class User:
    """Identity record of the logged-in user."""
    id: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    name: str = ""
    age: Optional[int] = None
    role: str = ""
    phone_number: str = ""
    bio: str = ""
    location: str = ""
    profile_image_url: str = ""
    profile_background_image_url: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    _FIELDS = (
        "email", "first_name", "last_name", "name", "role", "phone_number",
        "bio", "location", "profile_image_url", "profile_background_image_url",
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        """Build a User from a server/persisted record.

        Raises:
            ValueError: If ``data`` is not a mapping.
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"User record must be an object, got {type(data).__name__}")

        known = {"_id", "age", *cls._FIELDS}
        return cls(
            id=_text(data.get("_id")),
            age=_int_or_none(data.get("age")),
            extra={k: v for k, v in data.items() if k not in known},
            **{name: _text(data.get(name)) for name in cls._FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data["_id"] = self.id
        for name in self._FIELDS:
            value = getattr(self, name)
            if value:
                data[name] = value
        if self.age is not None:
            data["age"] = self.age
        return data

    def merged(self, changes: Mapping[str, Any]) -> User:
        """Return a copy with ``changes`` applied on top of this record."""
        data = self.to_dict()
        data.update(changes)
        return User.from_dict(data)

    @property
    def display_name(self) -> str:
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.name or self.email


@dataclass
class Product:
    """Marketplace listing."""
    id: str = ""
    name: str = ""
    description: str = ""
    price: float = 0.0
    category: str = ""
    seller: Any = None
    stock_quantity: int = 0
    unit: str = ""
    product_images: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Product:
        if not isinstance(data, Mapping):
            raise ValueError(f"Product record must be an object, got {type(data).__name__}")
        images = data.get("product_images") or []
        return cls(
            id=_text(data.get("_id")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            price=float(data.get("price") or 0),
            category=_text(data.get("category")),
            seller=data.get("seller"),
            stock_quantity=int(data.get("stock_quantity") or 0),
            unit=_text(data.get("unit")),
            product_images=[str(i) for i in images] if isinstance(images, list) else [],
        )

    @property
    def cover_image(self) -> str:
        return self.product_images[0] if self.product_images else ""

    @property
    def seller_name(self) -> str:
        # seller is either an id string or a populated user document
        if isinstance(self.seller, Mapping):
            return User.from_dict(self.seller).display_name
        return _text(self.seller)


@dataclass
class ChatSession:
    """A stored conversation with the eco assistant."""
    id: str = ""
    title: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChatSession:
        if not isinstance(data, Mapping):
            raise ValueError(f"Chat session must be an object, got {type(data).__name__}")
        return cls(id=_text(data.get("_id")), title=_text(data.get("title")))

    @property
    def display_title(self) -> str:
        return self.title or "Untitled Chat"
