from __future__ import annotations

import copy
import random
import re
import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def new_record_id() -> str:
    """Fresh opaque identifier for a newly created record"""
    return uuid.uuid4().hex


def today_iso(today: Optional[date] = None) -> str:
    return (today or date.today()).isoformat()


class StockType(str, Enum):
    CERAMIC = "Ceramic"
    PORCELAIN = "Porcelain"
    MARBLE = "Marble"
    GRANITE = "Granite"
    MOSAIC = "Mosaic"
    WOOD_LOOK = "Wood Look"


class EmploymentStatus(str, Enum):
    ACTIVE = "Active"
    ON_LEAVE = "On Leave"
    TERMINATED = "Terminated"


class PrivilegeLevel(str, Enum):
    STAFF = "Staff"
    MANAGER = "Manager"
    ADMIN = "Admin"


def privilege_for_role(role: str) -> PrivilegeLevel:
    """Map a free-text job title to a privilege level"""
    lowered = (role or "").lower()
    if "admin" in lowered:
        return PrivilegeLevel.ADMIN
    if "manager" in lowered:
        return PrivilegeLevel.MANAGER
    return PrivilegeLevel.STAFF


class Record(BaseModel):
    """Base for stored records: camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str

    # Stored payload kept verbatim when it does not validate
    _raw_payload: Any = PrivateAttr(default=None)

    @property
    def is_raw(self) -> bool:
        return self._raw_payload is not None

    def to_payload(self) -> Any:
        if self._raw_payload is None:
            return self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not isinstance(self._raw_payload, dict):
            return self._raw_payload
        # Only fields edited since decoding are written over the stored payload
        edited = self.model_dump(mode="json", by_alias=True, exclude_unset=True, exclude={"id"})
        return {**self._raw_payload, **edited}

    def to_row(self) -> Dict[str, Any]:
        return {"id": self.id, "json_data": self.to_payload()}

    @classmethod
    def decode(cls, payload: Any, record_id: Optional[str] = None):
        """
        Validate a stored payload without ever losing it.

        A payload that fails validation comes back as a record holding only
        its id, with the original payload carried through unchanged to the
        next save.
        """
        if isinstance(payload, dict) and record_id is not None:
            payload = {**payload, "id": record_id}
        try:
            return cls.model_validate(payload)
        except ValidationError:
            if record_id is None:
                record_id = payload.get("id") if isinstance(payload, dict) else None
            record = cls.model_construct(id=str(record_id or ""))
            record._raw_payload = copy.deepcopy(payload)
            return record

    @classmethod
    def from_row(cls, row: Dict[str, Any]):
        # The id column wins over any id copied into the payload
        payload = row.get("json_data")
        return cls.decode({} if payload is None else payload, record_id=row["id"])


class StockItem(Record):
    name: str = ""
    type: StockType = StockType.CERAMIC
    size: str = ""
    price: float = Field(default=0.0, ge=0)
    # Fractional quantities are kept as entered
    stock_quantity: Union[int, float] = 0
    description: str = ""
    image_url: str = ""

    @field_validator("stock_quantity")
    @classmethod
    def validate_stock_quantity(cls, value: Union[int, float]) -> Union[int, float]:
        if value < 0:
            raise ValueError("stockQuantity must be >= 0")
        return value

    @classmethod
    def create(cls, name: str, type: StockType, size: str, price: float = 0.0,
               stock_quantity: Union[int, float] = 0, description: str = "",
               image_url: Optional[str] = None) -> "StockItem":
        if not image_url:
            image_url = f"https://picsum.photos/400/400?random={random.randint(0, 999)}"
        return cls(
            id=new_record_id(),
            name=name,
            type=type,
            size=size,
            price=price,
            stock_quantity=stock_quantity,
            description=description,
            image_url=image_url,
        )

    @property
    def stock_value(self) -> float:
        return self.price * self.stock_quantity


class CustomerRecord(Record):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    total_spent: float = Field(default=0.0, ge=0)
    purchased_volume: Optional[float] = Field(default=None, ge=0)
    assigned_to: Optional[str] = None
    meeting_date: Optional[str] = Field(default=None, description="YYYY-MM-DD, compared as a string")
    meeting_info: Optional[str] = None

    @field_validator("meeting_date", mode="before")
    @classmethod
    def validate_meeting_date(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        if isinstance(value, date):
            return value.isoformat()
        if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
            raise ValueError("meetingDate must be a zero-padded YYYY-MM-DD date")
        date.fromisoformat(value)
        return value

    @classmethod
    def create(cls, name: str, email: str = "", phone: str = "", address: str = "",
               total_spent: float = 0.0, purchased_volume: float = 0.0,
               meeting_date: Optional[str] = None, meeting_info: Optional[str] = None,
               assigned_to: Optional[str] = None, today: Optional[date] = None) -> "CustomerRecord":
        # An agenda without a date is scheduled for today so it shows up in reminders
        if meeting_info and meeting_info.strip() and not meeting_date:
            meeting_date = today_iso(today)
        return cls(
            id=new_record_id(),
            name=name,
            email=email,
            phone=phone,
            address=address,
            total_spent=total_spent,
            purchased_volume=purchased_volume,
            meeting_date=meeting_date,
            meeting_info=meeting_info,
            assigned_to=assigned_to,
        )


class StaffNotification(Record):
    message: str
    date: str
    is_read: bool = False
    sender: str = "Admin"

    @classmethod
    def create(cls, message: str, sender: str = "Admin") -> "StaffNotification":
        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return cls(id=new_record_id(), message=message, date=stamp, sender=sender)


class StaffRecord(Record):
    name: str = ""
    role: str = ""
    email: str = ""
    status: EmploymentStatus = EmploymentStatus.ACTIVE
    join_date: str = ""
    username: Optional[str] = None
    password: Optional[str] = None
    avatar_url: Optional[str] = None
    notifications: List[StaffNotification] = Field(default_factory=list)
    privilege: PrivilegeLevel = PrivilegeLevel.STAFF

    @model_validator(mode="before")
    @classmethod
    def derive_privilege(cls, data: Any) -> Any:
        # Derived once from the role when the record is created or first decoded
        if isinstance(data, dict) and data.get("privilege") is None:
            data = dict(data)
            data["privilege"] = privilege_for_role(data.get("role", ""))
        return data

    @classmethod
    def create(cls, name: str, role: str, email: str = "",
               status: EmploymentStatus = EmploymentStatus.ACTIVE,
               username: Optional[str] = None, password: Optional[str] = None,
               avatar_url: Optional[str] = None, today: Optional[date] = None) -> "StaffRecord":
        joined = today or date.today()
        return cls(
            id=new_record_id(),
            name=name,
            role=role,
            email=email,
            status=status,
            join_date=f"{joined.month}/{joined.day}/{joined.year}",
            username=username,
            password=password,
            avatar_url=avatar_url,
            notifications=[],
        )

    @property
    def is_privileged(self) -> bool:
        return self.privilege != PrivilegeLevel.STAFF

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)
