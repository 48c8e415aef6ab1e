from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import AddressValidationError

COUNTRIES: list[tuple[str, str]] = [
    ("Cambodia", "Cambodia (KH)"),
]

CAMBODIA_PROVINCES: list[str] = [
    "Phnom Penh",
    "Banteay Meanchey",
    "Battambang",
    "Kampong Cham",
    "Kampong Chhnang",
    "Kampong Speu",
    "Kampong Thom",
    "Kampot",
    "Kandal",
    "Kep",
    "Koh Kong",
    "Kratié",
    "Mondulkiri",
    "Oddar Meanchey",
    "Pailin",
    "Preah Sihanouk",
    "Preah Vihear",
    "Prey Veng",
    "Pursat",
    "Ratanakiri",
    "Siem Reap",
    "Stung Treng",
    "Svay Rieng",
    "Takéo",
    "Tboung Khmum",
]

_VALID_COUNTRIES = {value for value, _label in COUNTRIES}
_VALID_PROVINCES = set(CAMBODIA_PROVINCES)

_CAMBODIA_PHONE_RE = re.compile(
    r"^(?:\+855|0)"
    r"(?:(?:[1-9]\d|2[3-7]|3[1-6]|4[2-4]|5[1-5]|6[0-9]|7[0-9]|8[0-9]|9[0-9])\d{6,7}|(?:[1-9]\d{7,8}))$"
)
_ALPHABETIC_RE = re.compile(r"^[a-zA-Z\s]+$")


def _clean(raw) -> str:
    return raw.strip() if isinstance(raw, str) else ""


@dataclass(frozen=True)
class AddressFields:
    first_name: str
    last_name: str
    phone_number: str
    street_address: str
    apartment: str | None
    country: str
    city_province: str
    is_default: bool = False

    def as_model_fields(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone_number,
            "street_address": self.street_address,
            "apartment": self.apartment,
            "country": self.country,
            "city_province": self.city_province,
            "is_default": self.is_default,
        }


def sanitize_name(raw: str) -> str:
    """Trim, collapse inner whitespace and capitalize each word: '  john   DOE ' -> 'John Doe'."""
    if not raw or not isinstance(raw, str):
        return ""
    words = raw.strip().lower().split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def validate_person_name(raw: str, *, field: str, label: str) -> str:
    name = _clean(raw)
    if len(name) < 2:
        raise AddressValidationError(f"{label} must be at least 2 characters", field=field)
    if len(name) > 50:
        raise AddressValidationError(f"{label} must not exceed 50 characters", field=field)
    if not _ALPHABETIC_RE.match(name):
        raise AddressValidationError(f"{label} must contain only letters", field=field)
    return sanitize_name(name)


def is_valid_cambodia_phone(raw: str) -> bool:
    return bool(_CAMBODIA_PHONE_RE.match(_clean(raw)))


def validate_cambodia_phone(raw: str, *, field: str = "phone_number") -> str:
    phone = _clean(raw)
    if not phone:
        raise AddressValidationError("Phone number is required", field=field)
    if not is_valid_cambodia_phone(phone):
        raise AddressValidationError("Please enter a valid Cambodian phone number", field=field)
    return phone


def validate_street_address(raw: str) -> str:
    street = _clean(raw)
    if len(street) < 5:
        raise AddressValidationError("Street address must be at least 5 characters", field="street_address")
    if len(street) > 200:
        raise AddressValidationError("Street address is too long", field="street_address")
    return street


def validate_apartment(raw: str | None) -> str | None:
    apartment = _clean(raw)
    if len(apartment) > 50:
        raise AddressValidationError("Apartment info is too long", field="apartment")
    return apartment or None


def validate_country(raw: str) -> str:
    if not isinstance(raw, str) or raw not in _VALID_COUNTRIES:
        raise AddressValidationError("Please select a valid country", field="country")
    return raw


def validate_province(raw: str) -> str:
    if not isinstance(raw, str) or raw not in _VALID_PROVINCES:
        raise AddressValidationError("Please select a valid city/province", field="city_province")
    return raw


_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off", ""}


def parse_is_default(raw) -> bool:
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
    raise AddressValidationError("Default flag must be true or false", field="is_default")


def validate_address_fields(data: dict) -> AddressFields:
    """Validate and sanitize raw address input; the first failing field is reported."""
    return AddressFields(
        first_name=validate_person_name(data.get("first_name"), field="first_name", label="First name"),
        last_name=validate_person_name(data.get("last_name"), field="last_name", label="Last name"),
        phone_number=validate_cambodia_phone(data.get("phone_number")),
        street_address=validate_street_address(data.get("street_address")),
        apartment=validate_apartment(data.get("apartment")),
        country=validate_country(data.get("country")),
        city_province=validate_province(data.get("city_province")),
        is_default=parse_is_default(data.get("is_default")),
    )
