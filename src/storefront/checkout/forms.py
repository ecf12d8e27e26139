"""Checkout form validation: the schema collaborator used by the wizard.

Each wizard step has a pydantic schema. ``validate(values, schema)`` returns
a mapping of field name to the first error message for that field, or an
empty dict when the values are acceptable. ``parse`` returns the cleaned
values (whitespace stripped, defaults filled in) once validation passed.
"""

import re
from datetime import date

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic import ValidationError as SchemaValidationError
from pydantic_core import PydanticCustomError

LETTERS = re.compile(r"^[a-zA-Z\s-]+$")
EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")
PHONE = re.compile(r"^\+?[0-9\s-]{9,15}$")
POSTAL_CODE = re.compile(r"^\d{2}-\d{3}$")
CARD_NUMBER = re.compile(r"^[0-9\s]+$")
EXPIRY = re.compile(r"^\d{2}/\d{2}$")
CVV = re.compile(r"^\d{3,4}$")

SHIPPING_METHODS = ("standard", "express")
PAYMENT_METHODS = ("card", "transfer")


def _fail(message):
    return PydanticCustomError("checkout_form", message)


def luhn_check(card_number) -> bool:
    """Validate a card number with the Luhn checksum (13 to 19 digits)."""
    if not card_number:
        return False
    digits = re.sub(r"\D", "", str(card_number))
    if len(digits) < 13 or len(digits) > 19:
        return False

    checksum = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        checksum += digit
    return checksum % 10 == 0


def is_not_expired(value, today: date | None = None) -> bool:
    """True for an ``MM/YY`` expiry in the current month or later."""
    if not value:
        return True
    if not EXPIRY.match(value):
        return False

    month, year = (int(part) for part in value.split("/"))
    if month < 1 or month > 12:
        return False

    today = today or date.today()
    current_year = today.year % 100
    if year < current_year:
        return False
    if year == current_year and month < today.month:
        return False
    return True


class _StepForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", validate_default=True)


class ContactForm(_StepForm):
    name: str = ""
    surname: str = ""
    email: str = ""
    phone: str = ""

    @field_validator("name", "surname")
    @classmethod
    def _person_name(cls, value: str, info: ValidationInfo) -> str:
        label = info.field_name.capitalize()
        if not value:
            raise _fail(f"{label} is required")
        if len(value) < 2:
            raise _fail(f"{label} must be at least 2 characters")
        if not LETTERS.match(value):
            raise _fail(f"{label} can only contain letters")
        return value

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if not value:
            raise _fail("Email is required")
        if not EMAIL.match(value):
            raise _fail("Please enter a valid email address (e.g. user@domain.com)")
        return value

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str) -> str:
        if not value:
            raise _fail("Phone number is required")
        if not PHONE.match(value):
            raise _fail("Phone number must contain only digits (9-15 chars)")
        return value


class ShippingForm(_StepForm):
    address: str = ""
    house_number: str = ""
    flat_number: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""
    shipping_method: str = "standard"

    @field_validator("address")
    @classmethod
    def _address(cls, value: str) -> str:
        if not value:
            raise _fail("Street address is required")
        if len(value) < 3:
            raise _fail("Address is too short")
        return value

    @field_validator("house_number")
    @classmethod
    def _house_number(cls, value: str) -> str:
        if not value:
            raise _fail("House number is required")
        return value

    @field_validator("city", "country")
    @classmethod
    def _place_name(cls, value: str, info: ValidationInfo) -> str:
        label = "City" if info.field_name == "city" else "Country"
        minimum = 2 if info.field_name == "city" else 3
        if not value:
            raise _fail(f"{label} is required")
        if len(value) < minimum:
            raise _fail(f"{label} name is too short")
        if not LETTERS.match(value):
            raise _fail(f"{label} name cannot contain digits")
        return value

    @field_validator("postal_code")
    @classmethod
    def _postal_code(cls, value: str) -> str:
        if not value:
            raise _fail("Postal code is required")
        if not POSTAL_CODE.match(value):
            raise _fail("Postal code must follow format XX-XXX (e.g. 00-001)")
        return value

    @field_validator("shipping_method")
    @classmethod
    def _shipping_method(cls, value: str) -> str:
        if value not in SHIPPING_METHODS:
            raise _fail("Invalid shipping method")
        return value


class PaymentForm(_StepForm):
    payment_method: str = "card"
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""

    @field_validator("payment_method")
    @classmethod
    def _payment_method(cls, value: str) -> str:
        if value not in PAYMENT_METHODS:
            raise _fail("Invalid payment method")
        return value

    # Card fields are only checked when paying by card; ``info.data`` holds
    # the already validated payment_method (absent when it was invalid).
    @field_validator("card_number")
    @classmethod
    def _card_number(cls, value: str, info: ValidationInfo) -> str:
        if info.data.get("payment_method") != "card":
            return value
        if not value:
            raise _fail("Card number is required")
        if not CARD_NUMBER.match(value):
            raise _fail("Card number must contain only digits")
        if not luhn_check(value.replace(" ", "")):
            raise _fail("Invalid card number (Luhn check failed)")
        return value

    @field_validator("expiry_date")
    @classmethod
    def _expiry_date(cls, value: str, info: ValidationInfo) -> str:
        if info.data.get("payment_method") != "card":
            return value
        if not value:
            raise _fail("Expiry date is required")
        if not EXPIRY.match(value):
            raise _fail("Format MM/YY (e.g. 12/25)")
        if not is_not_expired(value):
            raise _fail("Card has expired")
        return value

    @field_validator("cvv")
    @classmethod
    def _cvv(cls, value: str, info: ValidationInfo) -> str:
        if info.data.get("payment_method") != "card":
            return value
        if not value:
            raise _fail("CVV is required")
        if not CVV.match(value):
            raise _fail("CVV must be 3 or 4 digits")
        return value


SCHEMAS = {
    "contact": ContactForm,
    "shipping": ShippingForm,
    "payment": PaymentForm,
}


def _schema(schema) -> type[_StepForm]:
    return SCHEMAS[schema] if isinstance(schema, str) else schema


def _present(values) -> dict:
    return {key: value for key, value in (values or {}).items() if value is not None}


def validate(values, schema) -> dict[str, str]:
    """Return ``{field: message}`` for every invalid field; empty when valid."""
    try:
        _schema(schema).model_validate(_present(values))
    except SchemaValidationError as exc:
        errors = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "__all__"
            errors.setdefault(field, error["msg"])
        return errors
    return {}


def parse(values, schema) -> dict:
    """Return cleaned values for a form that already passed ``validate``."""
    return _schema(schema).model_validate(_present(values)).model_dump()
