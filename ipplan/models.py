# models.py
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ipplan import config
from ipplan.ip_math import block_size, cidr_to_decimal, hosts_for_mask, ip_to_number


class SubnetReservation(BaseModel):
    """One registry entry; serialized with the camelCase keys of DATA.json."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    network: str
    mask: int = Field(ge=0, le=32)
    range_start: str = Field(alias="rangeStart")
    range_end: str = Field(alias="rangeEnd")
    assigned_to: str = Field(default="", alias="assignedTo")

    @field_validator("network", "range_start", "range_end")
    @classmethod
    def _dotted_quad(cls, v):
        ip_to_number(v)
        return v

    def first_address(self) -> int:
        return ip_to_number(self.network)

    def last_address(self) -> int:
        return self.first_address() + block_size(self.mask) - 1

    def overlaps(self, start: int, end: int) -> bool:
        return not (end < self.first_address() or start > self.last_address())

    @property
    def prefix(self) -> str:
        return f"{self.network}/{self.mask}"


class DeviceRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    object_name: str = ""
    category: str = ""
    device_name: str = ""
    quantity: int = Field(default=1, ge=1)
    device_class: str = ""

    @field_validator("device_class", mode="before")
    @classmethod
    def _normalize_class(cls, v):
        return (v or "").strip().lower()

    @property
    def is_dynamic(self) -> bool:
        return self.device_class == "lanz1"


class ClassifiedRow(DeviceRow):
    included: bool


class AssignedRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    object_name: str
    category: str
    device_name: str
    address: str
    mask: str
    gateway: str
    ntp_server: str

    @property
    def is_dynamic(self) -> bool:
        return self.address == config.DYNAMIC_ADDRESS


class EquipmentItem(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    item_class: str = Field(default=config.EQUIPMENT_CLASS, alias="class")
    kind: str  # serwer, licencja, rejestrator
    quantity: int = Field(ge=1)
    description: str


class StationConfig(BaseModel):
    lpr_enabled: bool = False
    red_light_enabled: bool = False


class AllocationResult(BaseModel):
    reservation: SubnetReservation
    rows: List[AssignedRow] = []
    equipment: List[EquipmentItem] = []

    @property
    def subnet_mask(self) -> str:
        return cidr_to_decimal(self.reservation.mask)

    @property
    def prefix(self) -> str:
        return self.reservation.prefix

    @property
    def used(self) -> int:
        return sum(1 for r in self.rows if not r.is_dynamic)

    @property
    def reserve(self) -> int:
        return hosts_for_mask(self.reservation.mask) - self.used
