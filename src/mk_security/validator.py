"""Input validation and sanitization for user-supplied order fields.

Every check is a pure function of (limits, value): no I/O, no shared state.
String inputs are trimmed and length-capped before the type-specific check;
a length violation short-circuits everything else.
"""
import html
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from src.mk_common.enums import ValidationKind
from src.mk_common.errors import ValidationError
from src.mk_common.wire import MAX_UINT24

MAX_SAFE_INTEGER = 2**53 - 1

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

_DANGEROUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"data:\s*text/html", re.IGNORECASE),
    re.compile(r"vbscript:", re.IGNORECASE),
)


@dataclass(frozen=True)
class ValidationLimits:
    price_min: Decimal = Decimal("0.000001")
    price_max: Decimal = Decimal("1000000")
    quantity_min: int = 1
    quantity_max: int = MAX_UINT24
    token_id_min: int = 1
    token_id_max: int = MAX_SAFE_INTEGER
    max_input_length: int = 1000


@dataclass(frozen=True)
class ValidationResult:
    value: Any = None
    errors: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def unwrap(self, field: str) -> Any:
        """Return the sanitized value or raise ValidationError(1001) for `field`."""
        if self.errors:
            raise ValidationError(field, list(self.errors))
        return self.value


def _ok(value: Any) -> ValidationResult:
    return ValidationResult(value=value)


def _fail(message: str) -> ValidationResult:
    return ValidationResult(errors=(message,))


def _to_decimal(value: Any) -> Decimal | None:
    """Parse numbers and numeric strings; None when not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, Decimal):
            number = value
        elif isinstance(value, float):
            number = Decimal(repr(value))
        elif isinstance(value, (int, str)):
            number = Decimal(value)
        else:
            return None
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


class InputValidator:
    def __init__(self, limits: ValidationLimits | None = None) -> None:
        self.limits = limits or ValidationLimits()

    def validate(
        self, value: Any, kind: ValidationKind | str, max_length: int | None = None
    ) -> ValidationResult:
        if isinstance(value, str):
            value = value.strip()
            cap = max_length if max_length is not None else self.limits.max_input_length
            if len(value) > cap:
                return _fail(f"Input too long. Maximum {cap} characters allowed.")

        try:
            kind = ValidationKind(kind)
        except ValueError:
            return _fail(f"Unknown validation type: {kind}")

        if kind is ValidationKind.PRICE:
            return self.validate_price(value)
        if kind is ValidationKind.QUANTITY:
            return self.validate_quantity(value)
        if kind is ValidationKind.TOKEN_ID:
            return self.validate_token_id(value)
        if kind is ValidationKind.ADDRESS:
            return self.validate_address(value)
        return self.validate_text(value)

    def validate_price(self, value: Any) -> ValidationResult:
        price = _to_decimal(value)
        if price is None:
            return _fail("Price must be a valid number")
        if price <= 0:
            return _fail("Price must be greater than 0")
        if price < self.limits.price_min:
            return _fail(f"Price must be at least {self.limits.price_min} ETH")
        if price > self.limits.price_max:
            return _fail(f"Price cannot exceed {self.limits.price_max} ETH")
        return _ok(price)

    def validate_quantity(self, value: Any) -> ValidationResult:
        number = _to_decimal(value)
        if number is None:
            return _fail("Quantity must be a valid number")
        if number != number.to_integral_value():
            return _fail("Quantity must be a whole number")
        quantity = int(number)
        if quantity <= 0:
            return _fail("Quantity must be greater than 0")
        if quantity < self.limits.quantity_min:
            return _fail(f"Quantity must be at least {self.limits.quantity_min}")
        if quantity > self.limits.quantity_max:
            return _fail(f"Quantity cannot exceed {self.limits.quantity_max}")
        return _ok(quantity)

    def validate_token_id(self, value: Any) -> ValidationResult:
        number = _to_decimal(value)
        if number is None or number != number.to_integral_value():
            return _fail("Token ID must be a valid integer")
        token_id = int(number)
        if token_id < self.limits.token_id_min:
            return _fail(f"Token ID must be at least {self.limits.token_id_min}")
        if token_id > self.limits.token_id_max:
            return _fail("Token ID is too large")
        return _ok(token_id)

    def validate_address(self, value: Any) -> ValidationResult:
        if not isinstance(value, str):
            return _fail("Address must be a string")
        if not _ADDRESS_RE.match(value):
            return _fail("Invalid Ethereum address format")
        return _ok(value.lower())

    def validate_text(self, value: Any) -> ValidationResult:
        if not isinstance(value, str):
            return _fail("Text must be a string")
        for pattern in _DANGEROUS_PATTERNS:
            if pattern.search(value):
                return _fail("Text contains potentially dangerous content")
        return _ok(html.escape(value, quote=True))
