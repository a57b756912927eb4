"""Customer address book: typed address ids and the address API client."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import structlog

from shared.exceptions import ValidationError
from shared.http import BackendClient
from shared.result import ServiceResult

logger = structlog.get_logger(__name__)

_PREFIXED_ID = re.compile(r"^(?:addr-)?(\d+)$")


@dataclass(frozen=True, order=True)
class AddressId:
    """Backend address id, carried as-is from the address fetch to order placement."""

    value: int

    @classmethod
    def parse(cls, raw: "AddressId | int | str") -> "AddressId":
        """Accept an ``AddressId``, an int, ``"12"`` or a legacy ``"addr-12"``."""
        if isinstance(raw, AddressId):
            return raw
        if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
            return cls(raw)
        match = _PREFIXED_ID.match(str(raw).strip())
        if match is None or int(match.group(1)) <= 0:
            raise ValidationError({"address_id": [f"Invalid address identifier: {raw!r}"]})
        return cls(int(match.group(1)))

    def __str__(self) -> str:
        return str(self.value)


class AddressType(Enum):
    HOME = "home"
    OFFICE = "office"
    OTHER = "other"

    @classmethod
    def from_api(cls, raw: str | None) -> "AddressType":
        if raw == "work":
            return cls.OFFICE
        try:
            return cls(raw or "home")
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class Address:
    id: AddressId | None
    first_name: str
    last_name: str
    street: str
    city: str
    state: str
    pincode: str
    country: str
    phone: str = ""
    type: AddressType = AddressType.HOME
    is_default: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def formatted(self) -> str:
        """Single-line address as sent with an order."""
        parts = [self.full_name, self.street, self.city, self.state, self.pincode, self.country]
        return ", ".join(part for part in parts if part)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Address":
        return cls(
            id=AddressId(int(data["id"])),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            street=data.get("address_line_1") or "",
            city=data.get("city") or "",
            state=data.get("state") or "",
            pincode=str(data.get("postal_code") or ""),
            country=data.get("country") or "",
            phone=data.get("phone_number") or "",
            type=AddressType.from_api(data.get("address_type")),
            is_default=bool(data.get("is_default")),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone_number": self.phone,
            "address_type": self.type.value,
            "is_default": self.is_default,
            "address_line_1": self.street,
            "address_line_2": "",
            "city": self.city,
            "state": self.state,
            "postal_code": self.pincode,
            "country": self.country,
        }

    def validate(self) -> None:
        errors: dict[str, list[str]] = {}
        for field_name in ("street", "city", "pincode"):
            if not getattr(self, field_name).strip():
                errors[field_name] = [f"{field_name} is required"]
        if errors:
            raise ValidationError(errors)


class AddressBook:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    def list_addresses(self) -> ServiceResult[list[Address]]:
        return self._backend.call(
            "GET",
            "/me/addresses",
            parse=lambda body: [Address.from_api(item) for item in body or []],
            fallback_message="Failed to fetch addresses",
        )

    def add(self, address: Address) -> ServiceResult[Address]:
        try:
            address.validate()
        except ValidationError as exc:
            return ServiceResult.failure(exc.first_message)
        result = self._backend.call(
            "POST",
            "/me/addresses",
            json=address.to_api(),
            parse=Address.from_api,
            fallback_message="Failed to add address",
            success_message="Address added successfully",
        )
        if result.success:
            logger.info("Address added", address_id=str(result.data.id))
        return result

    def update(self, address_id: AddressId, address: Address) -> ServiceResult[Address]:
        return self._backend.call(
            "PUT",
            f"/me/addresses/{address_id}",
            json=address.to_api(),
            parse=Address.from_api,
            fallback_message="Failed to update address",
            success_message="Address updated successfully",
        )

    def delete(self, address_id: AddressId) -> ServiceResult[bool]:
        return self._backend.call(
            "DELETE",
            f"/me/addresses/{address_id}",
            parse=lambda _body: True,
            fallback_message="Failed to delete address",
            success_message="Address deleted successfully",
        )

    def set_default(self, address: Address) -> ServiceResult[Address]:
        if address.id is None:
            return ServiceResult.failure("Address not found")
        return self.update(address.id, replace(address, is_default=True))
