# dataclass models, plus conversion to and from the JSON shapes used by the
# REST collection and local storage (camelCase keys)

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Union

ProductId = Union[int, str]

ORDER_STATUS_PROCESSING = "Processing"


@dataclass(frozen=True)
class Review:
    user_id: str
    rating: int
    comment: str
    date: str  # YYYY-MM-DD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Review:
        return cls(
            user_id=data["userId"],
            rating=int(data["rating"]),
            comment=str(data.get("comment", "")),
            date=str(data.get("date", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "rating": self.rating,
            "comment": self.comment,
            "date": self.date,
        }


def average_rating(reviews) -> Optional[float]:
    """Mean rating rounded to one decimal, None when there are no reviews."""
    ratings = [r.rating for r in reviews]
    if not ratings:
        return None
    return round(sum(ratings) / len(ratings), 1)


@dataclass(frozen=True)
class Product:
    id: ProductId
    name: str
    price: float
    stock: int
    category: str = ""
    description: str = ""
    image_url: str = ""
    reviews: Tuple[Review, ...] = ()
    # fields we don't model, kept so a full-replace PUT doesn't drop them
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    _KNOWN = {
        "id",
        "name",
        "price",
        "stock",
        "category",
        "description",
        "imageUrl",
        "reviews",
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Product:
        return cls(
            id=data["id"],
            name=str(data.get("name", "")),
            price=float(data.get("price") or 0),
            stock=int(data.get("stock") or 0),
            category=str(data.get("category") or ""),
            description=str(data.get("description") or ""),
            image_url=str(data.get("imageUrl") or ""),
            reviews=tuple(Review.from_dict(r) for r in data.get("reviews") or []),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.extra,
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "stock": self.stock,
            "category": self.category,
            "description": self.description,
            "imageUrl": self.image_url,
            "reviews": [r.to_dict() for r in self.reviews],
        }

    @property
    def average_rating(self) -> Optional[float]:
        return average_rating(self.reviews)

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def with_review(self, review: Review) -> Product:
        """
        Return a copy carrying `review`. A review by the same user replaces the
        earlier one in place; otherwise it is appended.
        """
        reviews = list(self.reviews)
        for i, existing in enumerate(reviews):
            if existing.user_id == review.user_id:
                reviews[i] = review
                break
        else:
            reviews.append(review)
        return replace(self, reviews=tuple(reviews))


@dataclass(frozen=True)
class CartLineItem:
    product_id: ProductId
    name: str
    price: float
    image_url: str
    stock: int
    quantity: int

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> CartLineItem:
        return cls(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image_url=product.image_url,
            stock=product.stock,
            quantity=quantity,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CartLineItem:
        # older carts stored the whole product under "id"
        pid = data["productId"] if "productId" in data else data["id"]
        return cls(
            product_id=pid,
            name=str(data["name"]),
            price=float(data["price"]),
            image_url=str(data.get("imageUrl") or ""),
            stock=int(data["stock"]),
            quantity=int(data["quantity"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": self.price,
            "imageUrl": self.image_url,
            "stock": self.stock,
            "quantity": self.quantity,
        }

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class OrderItem:
    product_id: ProductId
    name: str
    price: float  # unit price at time of order
    quantity: int

    @classmethod
    def from_line_item(cls, item: CartLineItem) -> OrderItem:
        return cls(
            product_id=item.product_id,
            name=item.name,
            price=item.price,
            quantity=item.quantity,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> OrderItem:
        return cls(
            product_id=data["productId"],
            name=str(data.get("name", "")),
            price=float(data.get("price") or 0),
            quantity=int(data.get("quantity") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class Order:
    id: str
    user_id: Optional[str]
    date: str
    total: float
    status: str
    items: Tuple[OrderItem, ...]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Order:
        return cls(
            id=str(data["id"]),
            user_id=data.get("userId"),
            date=str(data.get("date", "")),
            total=float(data.get("total") or 0),
            status=str(data.get("status") or ORDER_STATUS_PROCESSING),
            items=tuple(OrderItem.from_dict(i) for i in data.get("items") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "date": self.date,
            "total": self.total,
            "status": self.status,
            "items": [i.to_dict() for i in self.items],
        }

    @property
    def item_summary(self) -> str:
        return ", ".join(f"{i.name} (x{i.quantity})" for i in self.items)


@dataclass(frozen=True)
class Notification:
    id: int
    message: str
    date: str
    time: str
    read: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Notification:
        return cls(
            id=int(data["id"]),
            message=str(data["message"]),
            date=str(data.get("date", "")),
            time=str(data.get("time", "")),
            read=bool(data.get("read", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "message": self.message,
            "date": self.date,
            "time": self.time,
            "read": self.read,
        }


@dataclass(frozen=True)
class UserProfile:
    name: str = ""
    address: str = ""
    phone: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UserProfile:
        return cls(
            name=str(data.get("name") or ""),
            address=str(data.get("address") or ""),
            phone=str(data.get("phone") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "address": self.address, "phone": self.phone}
