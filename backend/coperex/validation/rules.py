"""
Field rules used by the per-route validation chains.

Every rule exposes ``validate(value, ctx)``. It returns the (possibly
normalized) value on success and raises ``RuleViolation`` on failure.
Returning ``MISSING`` tells the chain to stop processing the field without
recording an error (used by the optional-field rules).
"""
from __future__ import annotations

import re
import string
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from email_validator import EmailNotValidError, validate_email

if TYPE_CHECKING:
    from coperex.validation.chain import ValidationContext


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class RuleViolation(Exception):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class Rule:
    message = "Invalid value"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message

    def validate(self, value: Any, ctx: "ValidationContext") -> Any:
        raise NotImplementedError

    def fail(self, message: Optional[str] = None):
        raise RuleViolation(message or self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _is_absent(value: Any) -> bool:
    return value is MISSING or value is None


# ---------- presence ----------

class Required(Rule):
    message = "This field is required"

    def validate(self, value, ctx):
        if _is_absent(value) or (isinstance(value, str) and not value.strip()):
            self.fail()
        return value


class OptionalField(Rule):
    """Skip the remaining rules of the chain when the field is absent."""

    def validate(self, value, ctx):
        if _is_absent(value):
            return MISSING
        return value


class RequiredUnless(Rule):
    """Required unless ``other`` is present in the request body."""

    def __init__(self, other: str, message: Optional[str] = None):
        super().__init__(message or f"This field is required when '{other}' is not provided")
        self.other = other

    def validate(self, value, ctx):
        if not _is_absent(value):
            return value
        if not _is_absent(ctx.body.get(self.other, MISSING)):
            return MISSING
        self.fail()


# ---------- type / format ----------

class IsString(Rule):
    message = "Must be a string"

    def validate(self, value, ctx):
        if not isinstance(value, str):
            self.fail()
        return value


class Trim(Rule):
    def validate(self, value, ctx):
        return value.strip() if isinstance(value, str) else value


class MinLength(Rule):
    def __init__(self, length: int, message: Optional[str] = None):
        super().__init__(message or f"Must be at least {length} characters long")
        self.length = length

    def validate(self, value, ctx):
        if not isinstance(value, str) or len(value) < self.length:
            self.fail()
        return value


class IsEmail(Rule):
    message = "Not a valid email"

    def validate(self, value, ctx):
        if not isinstance(value, str):
            self.fail()
        try:
            info = validate_email(value.strip(), check_deliverability=False)
        except EmailNotValidError:
            self.fail()
        return info.normalized.lower()


_INT_RE = re.compile(r"^[+-]?\d+$")

# Upper bound of the INTEGER columns and of offsets handed to the driver
MAX_INT = 2**31 - 1
MAX_PAGE_SIZE = 100


class IsInt(Rule):
    """Integer check with bounds; numeric strings are converted.

    ``max`` defaults to ``MAX_INT`` so no value overflows a column or an offset.
    """

    def __init__(self, min: Optional[int] = None, max: Optional[int] = MAX_INT, message: Optional[str] = None):
        super().__init__(message or "Must be an integer")
        self.min = min
        self.max = max

    def validate(self, value, ctx):
        if isinstance(value, bool):
            self.fail()
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        elif isinstance(value, str) and _INT_RE.match(value.strip()):
            value = int(value.strip())
        if not isinstance(value, int):
            self.fail()
        if self.min is not None and value < self.min:
            self.fail()
        if self.max is not None and value > self.max:
            self.fail()
        return value


class IsIn(Rule):
    def __init__(self, choices: Iterable[str], message: Optional[str] = None):
        self.choices = tuple(choices)
        super().__init__(message or f"Must be one of: {', '.join(self.choices)}")

    def validate(self, value, ctx):
        if value not in self.choices:
            self.fail()
        return value


class StrongPassword(Rule):
    message = (
        "Password must be at least 8 characters long and contain an uppercase letter, "
        "a lowercase letter, a number and a symbol"
    )

    def __init__(
        self,
        min_length: int = 8,
        min_lowercase: int = 1,
        min_uppercase: int = 1,
        min_numbers: int = 1,
        min_symbols: int = 1,
        message: Optional[str] = None,
    ):
        super().__init__(message)
        self.min_length = min_length
        self.min_lowercase = min_lowercase
        self.min_uppercase = min_uppercase
        self.min_numbers = min_numbers
        self.min_symbols = min_symbols

    def validate(self, value, ctx):
        if not isinstance(value, str) or len(value) < self.min_length:
            self.fail()
        lowercase = sum(1 for c in value if c.islower())
        uppercase = sum(1 for c in value if c.isupper())
        numbers = sum(1 for c in value if c.isdigit())
        symbols = sum(1 for c in value if c in string.punctuation or c == " ")
        if (
            lowercase < self.min_lowercase
            or uppercase < self.min_uppercase
            or numbers < self.min_numbers
            or symbols < self.min_symbols
        ):
            self.fail()
        return value


class NotFutureYear(Rule):
    message = "Founding year cannot be later than the current year"

    def __init__(self, now_fn: Callable[[], datetime] = datetime.now, message: Optional[str] = None):
        super().__init__(message)
        self.now_fn = now_fn

    def validate(self, value, ctx):
        if value > self.now_fn().year:
            self.fail()
        return value


# ---------- store-backed ----------

class Check(Rule):
    """Run a store predicate ``predicate(db, value, **kwargs)``.

    The predicate raises ``RuleViolation`` itself. ``exclude`` resolves the id
    of the record being edited so uniqueness checks can skip it.
    """

    def __init__(self, predicate: Callable[..., None], exclude: Optional[Callable[["ValidationContext"], Any]] = None):
        super().__init__()
        self.predicate = predicate
        self.exclude = exclude

    def validate(self, value, ctx):
        if self.exclude is not None:
            self.predicate(ctx.db, value, exclude_id=self.exclude(ctx))
        else:
            self.predicate(ctx.db, value)
        return value

    def __repr__(self) -> str:
        return f"Check({getattr(self.predicate, '__name__', self.predicate)!r})"


class Custom(Rule):
    """Run ``fn(value, ctx)``; the function raises ``RuleViolation`` on failure."""

    def __init__(self, fn: Callable[[Any, "ValidationContext"], Any]):
        super().__init__()
        self.fn = fn

    def validate(self, value, ctx):
        result = self.fn(value, ctx)
        return value if result is None else result
