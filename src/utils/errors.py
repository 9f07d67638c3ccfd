from typing import Optional


class ShopError(Exception):
    """
    Base of every error the storefront reports back to the user.
    Views catch this at the boundary and show it as a transient notification.
    """

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(ShopError, ValueError):
    """bad user input: empty fields, out of range rating, quantity < 1"""


class EmptyCartError(ValidationError):
    def __init__(self, message: str = "Your cart is empty. Add items before checking out!"):
        super().__init__(message)


class CapacityError(ShopError):
    """requested quantity exceeds the product's stock"""

    def __init__(self, name: str, stock: int):
        super().__init__(f"Cannot add more than {stock} of {name} to cart.")
        self.name = name
        self.stock = stock


class NotAuthenticatedError(ShopError):
    pass


class NotFoundError(ShopError, LookupError):
    pass


class TransportError(ShopError):
    """remote call failed or answered with a non-2xx status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
