"""Pydantic request/response schemas for the identity routes."""

from pydantic import BaseModel, Field

from identity.customer.account import Profile, User
from identity.customer.addresses import Address, AddressType


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)
    first_name: str
    last_name: str
    phone: str = ""
    gender: str = "male"


class UserSchema(BaseModel):
    id: str
    email: str
    role: str
    is_admin: bool

    @classmethod
    def from_user(cls, user: User) -> "UserSchema":
        return cls(id=user.id, email=user.email, role=user.role, is_admin=user.is_admin)


class AddressRequest(BaseModel):
    first_name: str
    last_name: str = ""
    street: str
    city: str
    state: str = ""
    pincode: str
    country: str = "India"
    phone: str = ""
    type: AddressType = AddressType.HOME
    is_default: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "first_name": "Asha",
                    "last_name": "Rao",
                    "street": "12 MG Road",
                    "city": "Bengaluru",
                    "state": "Karnataka",
                    "pincode": "560001",
                    "country": "India",
                    "phone": "9876543210",
                    "type": "home",
                    "is_default": True,
                }
            ]
        }
    }

    def to_address(self) -> Address:
        return Address(
            id=None,
            first_name=self.first_name,
            last_name=self.last_name,
            street=self.street,
            city=self.city,
            state=self.state,
            pincode=self.pincode,
            country=self.country,
            phone=self.phone,
            type=self.type,
            is_default=self.is_default,
        )


class AddressSchema(BaseModel):
    id: int | None
    full_name: str
    street: str
    city: str
    state: str
    pincode: str
    country: str
    phone: str
    type: str
    is_default: bool
    formatted: str

    @classmethod
    def from_address(cls, address: Address) -> "AddressSchema":
        return cls(
            id=address.id.value if address.id else None,
            full_name=address.full_name,
            street=address.street,
            city=address.city,
            state=address.state,
            pincode=address.pincode,
            country=address.country,
            phone=address.phone,
            type=address.type.value,
            is_default=address.is_default,
            formatted=address.formatted(),
        )


class ProfileSchema(BaseModel):
    id: str
    email: str
    role: str
    is_admin: bool
    first_name: str
    last_name: str
    full_name: str
    phone: str
    is_verified: bool
    gender: str | None = None
    addresses: list[AddressSchema]

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileSchema":
        user = profile.user
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            is_admin=user.is_admin,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            phone=user.phone,
            is_verified=profile.is_verified,
            gender=profile.gender,
            addresses=[AddressSchema.from_address(address) for address in profile.addresses],
        )
