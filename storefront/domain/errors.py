# storefront/domain/errors.py
"""
Bledy domenowe. Serwisy je rzucaja, routery lapia StorefrontError
i zamieniaja na HTTPException (status + code + message).
"""


class StorefrontError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> dict:
        detail = {"code": self.code, "message": self.message}
        if self.field:
            detail["field"] = self.field
        return detail


# walidacja


class ValidationFailed(StorefrontError):
    status_code = 400
    code = "validation_failed"

    def __init__(self, field: str, reason: str):
        super().__init__(reason, field=field)


# auth


class AuthenticationRequired(StorefrontError):
    status_code = 401
    code = "authentication_required"


class Forbidden(StorefrontError):
    status_code = 403
    code = "forbidden"


# not found


class NotFound(StorefrontError):
    status_code = 404
    code = "not_found"


class ProductNotFound(NotFound):
    code = "product_not_found"


class CartLineNotFound(NotFound):
    code = "cart_line_not_found"


class AddressNotFound(NotFound):
    code = "address_not_found"


class OrderNotFound(NotFound):
    code = "order_not_found"


# konflikty


class Conflict(StorefrontError):
    status_code = 409
    code = "conflict"


class EmptyCart(Conflict):
    code = "empty_cart"


class PaymentDeclined(Conflict):
    status_code = 402
    code = "payment_declined"


class CartChanged(Conflict):
    code = "cart_changed"


class CheckoutInProgress(Conflict):
    code = "checkout_in_progress"


class InvalidTransition(Conflict):
    code = "invalid_transition"


class DefaultAddressConflict(Conflict):
    code = "default_address_conflict"


class OrderNumberConflict(Conflict):
    code = "order_number_conflict"


# integralnosc (produkt zniknal z katalogu miedzy dodaniem a zamowieniem)


class ProductUnavailable(Conflict):
    code = "product_unavailable"


# zewnetrzne serwisy


class ServiceUnavailable(StorefrontError):
    status_code = 503
    code = "service_unavailable"
