from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

from ..errors import DecodeError

E = TypeVar("E", bound=Enum)


class EnumCodec(Generic[E]):
    """Fixed bidirectional mapping between enum members and stored strings."""

    def __init__(self, enum_cls: type[E], table: Mapping[E, str]) -> None:
        missing = [m for m in enum_cls if m not in table]
        if missing:
            raise ValueError(f"{enum_cls.__name__} codec missing members: {missing}")
        self.enum_cls = enum_cls
        self._to_str = dict(table)
        self._from_str = {v: k for k, v in table.items()}
        if len(self._from_str) != len(self._to_str):
            raise ValueError(f"{enum_cls.__name__} codec has duplicate strings")

    def encode(self, member: E) -> str:
        if not isinstance(member, self.enum_cls):
            raise TypeError(f"expected {self.enum_cls.__name__}, got {member!r}")
        return self._to_str[member]

    def decode(self, raw: Any) -> E:
        try:
            return self._from_str[raw]
        except (KeyError, TypeError):
            raise DecodeError(f"Unknown {self.enum_cls.__name__} value: {raw!r}") from None

    def values(self) -> list[str]:
        return list(self._from_str)


class AnimalStatus(Enum):
    AVAILABLE = "Available"
    REQUESTED = "Requested"
    ADOPTED = "Adopted"
    PASSED_AWAY = "PassedAway"

    def to_db(self) -> str:
        return ANIMAL_STATUS_CODEC.encode(self)

    @classmethod
    def from_db(cls, raw: Any) -> "AnimalStatus":
        return ANIMAL_STATUS_CODEC.decode(raw)


class RequestStatus(Enum):
    PENDING = "Pending"
    REJECTED = "Rejected"
    APPROVED = "Approved"

    def to_db(self) -> str:
        return REQUEST_STATUS_CODEC.encode(self)

    @classmethod
    def from_db(cls, raw: Any) -> "RequestStatus":
        return REQUEST_STATUS_CODEC.decode(raw)


class UserRole(Enum):
    STAFF = "Staff"
    CUSTOMER = "Customer"

    def to_db(self) -> str:
        return USER_ROLE_CODEC.encode(self)

    @classmethod
    def from_db(cls, raw: Any) -> "UserRole":
        return USER_ROLE_CODEC.decode(raw)


class LoginOutcome(Enum):
    SUCCESS = "success"
    INVALID_PASSWORD = "invalid-password"
    USER_NOT_FOUND = "user-not-found"


# Stored strings are kebab-case.
ANIMAL_STATUS_CODEC = EnumCodec(AnimalStatus, {
    AnimalStatus.AVAILABLE: "available",
    AnimalStatus.REQUESTED: "requested",
    AnimalStatus.ADOPTED: "adopted",
    AnimalStatus.PASSED_AWAY: "passed-away",
})
REQUEST_STATUS_CODEC = EnumCodec(RequestStatus, {
    RequestStatus.PENDING: "pending",
    RequestStatus.REJECTED: "rejected",
    RequestStatus.APPROVED: "approved",
})
USER_ROLE_CODEC = EnumCodec(UserRole, {
    UserRole.STAFF: "staff",
    UserRole.CUSTOMER: "customer",
})


def _opt_int(v: Any) -> int | None:
    return None if v is None else int(v)


@dataclass
class Animal:
    id: str
    name: str
    specie: str
    breed: str
    sex: str
    birth_month: int | None
    birth_year: int | None
    neutered: bool
    admission_timestamp: int
    status: AnimalStatus
    image_path: str | None
    appearance: str
    bio: str

    @classmethod
    def from_row(cls, r) -> "Animal":
        return cls(
            id=r["id"],
            name=r["name"],
            specie=r["specie"],
            breed=r["breed"],
            sex=r["sex"],
            birth_month=_opt_int(r["birth_month"]),
            birth_year=_opt_int(r["birth_year"]),
            neutered=bool(r["neutered"]),
            admission_timestamp=int(r["admission_timestamp"]),
            status=AnimalStatus.from_db(r["status"]),
            image_path=r["image_path"],
            appearance=r["appearance"],
            bio=r["bio"],
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["status"] = self.status.to_db()
        return d


@dataclass
class AnimalSummary:
    id: str
    name: str
    specie: str
    breed: str
    sex: str
    admission_timestamp: int
    status: AnimalStatus
    image_path: str | None

    @classmethod
    def from_row(cls, r) -> "AnimalSummary":
        return cls(
            id=r["id"],
            name=r["name"],
            specie=r["specie"],
            breed=r["breed"],
            sex=r["sex"],
            admission_timestamp=int(r["admission_timestamp"]),
            status=AnimalStatus.from_db(r["status"]),
            image_path=r["image_path"],
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["status"] = self.status.to_db()
        return d


@dataclass
class AdoptionRequest:
    id: str
    animal_id: str
    username: str
    name: str
    email: str
    tel_number: str
    address: str
    occupation: str
    annual_income: str
    num_people: int
    num_children: int
    request_timestamp: int
    # 0 until the request is approved
    adoption_timestamp: int
    status: RequestStatus
    country: str

    @classmethod
    def from_row(cls, r) -> "AdoptionRequest":
        return cls(
            id=r["id"],
            animal_id=r["animal_id"],
            username=r["username"],
            name=r["name"],
            email=r["email"],
            tel_number=r["tel_number"],
            address=r["address"],
            occupation=r["occupation"],
            annual_income=r["annual_income"],
            num_people=int(r["num_people"]),
            num_children=int(r["num_children"]),
            request_timestamp=int(r["request_timestamp"]),
            adoption_timestamp=int(r["adoption_timestamp"]),
            status=RequestStatus.from_db(r["status"]),
            country=r["country"],
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["status"] = self.status.to_db()
        return d


@dataclass
class AdoptionRequestSummary:
    id: str
    animal_id: str
    username: str
    name: str
    email: str
    request_timestamp: int
    status: RequestStatus

    @classmethod
    def from_row(cls, r) -> "AdoptionRequestSummary":
        return cls(
            id=r["id"],
            animal_id=r["animal_id"],
            username=r["username"],
            name=r["name"],
            email=r["email"],
            request_timestamp=int(r["request_timestamp"]),
            status=RequestStatus.from_db(r["status"]),
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["status"] = self.status.to_db()
        return d


@dataclass
class UserAuthentication:
    username: str
    password_hash: str
    role: UserRole


@dataclass
class CurrentUser:
    username: str
    role: UserRole

    def to_dict(self) -> dict:
        return {"username": self.username, "role": self.role.to_db()}
