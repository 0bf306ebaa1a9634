"""
Application state holder
Owns the in-memory collections, runs the startup protocol and schedules a
whole-collection save after every mutation
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional

from ..models import (
    CustomerRecord,
    StaffNotification,
    StaffRecord,
    StockItem,
    StockType,
    privilege_for_role,
    today_iso,
)
from .sync_engine import HealthStatus, LoadedCollections, SyncEngine

logger = logging.getLogger(__name__)


class StartupStatus(str, Enum):
    LOADING = "LOADING"
    READY = "READY"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SETUP_REQUIRED = "SETUP_REQUIRED"


@dataclass
class InventoryMetrics:
    total_stock_value: float
    total_stock_units: float
    total_volume_sold: float
    units_by_type: Dict[str, float] = field(default_factory=dict)
    top_category: str = ""


class AppState:
    """In-memory tiles / customers / employees kept in sync with the store"""

    def __init__(self, engine: SyncEngine):
        self.engine = engine
        self.status = StartupStatus.LOADING
        self.health: Optional[HealthStatus] = None

        self.tiles: List[StockItem] = []
        self.customers: List[CustomerRecord] = []
        self.employees: List[StaffRecord] = []

    # ===== STARTUP =====

    async def startup(self, seeds: Optional[LoadedCollections] = None) -> StartupStatus:
        """Health check (remote only), then load all three collections"""
        seeds = seeds or LoadedCollections()
        self.status = StartupStatus.LOADING

        if self.engine.remote_enabled:
            self.health = await self.engine.check_health()

            if self.health == HealthStatus.CONNECTION_ERROR:
                self.status = StartupStatus.CONNECTION_ERROR
                return self.status

            if self.health == HealthStatus.MISSING_TABLES:
                self.status = StartupStatus.SETUP_REQUIRED
                return self.status
        else:
            self.health = HealthStatus.UNAVAILABLE

        loaded = await self.engine.load_all(seeds.tiles, seeds.customers, seeds.employees)
        self.tiles = loaded.tiles
        self.customers = loaded.customers
        self.employees = loaded.employees

        self.status = StartupStatus.READY
        logger.info(
            f"✅ Loaded {len(self.tiles)} tiles, {len(self.customers)} customers, "
            f"{len(self.employees)} employees"
        )
        return self.status

    @property
    def is_ready(self) -> bool:
        return self.status == StartupStatus.READY

    def _sync_tiles(self) -> None:
        if self.is_ready:
            self.engine.tiles.schedule_save(self.tiles)

    def _sync_customers(self) -> None:
        if self.is_ready:
            self.engine.customers.schedule_save(self.customers)

    def _sync_employees(self) -> None:
        if self.is_ready:
            self.engine.employees.schedule_save(self.employees)

    # ===== TILES =====

    def add_tile(self, tile: StockItem) -> StockItem:
        self.tiles = [*self.tiles, tile]
        self._sync_tiles()
        return tile

    def update_tile(self, tile: StockItem) -> bool:
        if not any(t.id == tile.id for t in self.tiles):
            return False
        self.tiles = [tile if t.id == tile.id else t for t in self.tiles]
        self._sync_tiles()
        return True

    def remove_tile(self, tile_id: str) -> bool:
        remaining = [t for t in self.tiles if t.id != tile_id]
        if len(remaining) == len(self.tiles):
            return False
        self.tiles = remaining
        self._sync_tiles()
        return True

    def search_tiles(self, term: str) -> List[StockItem]:
        """Case-insensitive match on name or material"""
        needle = term.lower()
        return [t for t in self.tiles if needle in t.name.lower() or needle in t.type.value.lower()]

    # ===== CUSTOMERS =====

    def add_customer(self, customer: CustomerRecord) -> CustomerRecord:
        self.customers = [*self.customers, customer]
        self._sync_customers()
        return customer

    def update_customer(self, customer: CustomerRecord) -> bool:
        if not any(c.id == customer.id for c in self.customers):
            return False
        self.customers = [customer if c.id == customer.id else c for c in self.customers]
        self._sync_customers()
        return True

    def remove_customer(self, customer_id: str) -> bool:
        remaining = [c for c in self.customers if c.id != customer_id]
        if len(remaining) == len(self.customers):
            return False
        self.customers = remaining
        self._sync_customers()
        return True

    def upcoming_meetings(self, staff_id: str, today: Optional[date] = None) -> List[CustomerRecord]:
        """Meetings assigned to staff_id from today onwards, soonest first"""
        today_str = today_iso(today)
        meetings = [
            c for c in self.customers
            if c.assigned_to == staff_id and c.meeting_date and c.meeting_date >= today_str
        ]
        # ISO dates order correctly as strings
        return sorted(meetings, key=lambda c: c.meeting_date)

    def next_meeting(self, staff_id: str, today: Optional[date] = None) -> Optional[CustomerRecord]:
        upcoming = self.upcoming_meetings(staff_id, today)
        return upcoming[0] if upcoming else None

    def meetings_tomorrow(self, staff_id: str, today: Optional[date] = None) -> List[CustomerRecord]:
        tomorrow = today_iso((today or date.today()) + timedelta(days=1))
        return [c for c in self.upcoming_meetings(staff_id, today) if c.meeting_date == tomorrow]

    # ===== EMPLOYEES =====

    def add_employee(self, employee: StaffRecord) -> StaffRecord:
        self.employees = [*self.employees, employee]
        self._sync_employees()
        return employee

    def update_employee(self, employee: StaffRecord) -> bool:
        existing = self.get_employee(employee.id)
        if existing is None:
            return False
        # A changed title re-derives privilege unless the caller set one explicitly
        if employee.role != existing.role and employee.privilege == existing.privilege:
            employee = employee.model_copy(update={"privilege": privilege_for_role(employee.role)})
        self.employees = [employee if e.id == employee.id else e for e in self.employees]
        self._sync_employees()
        return True

    def remove_employee(self, employee_id: str) -> bool:
        remaining = [e for e in self.employees if e.id != employee_id]
        if len(remaining) == len(self.employees):
            return False
        self.employees = remaining
        self._sync_employees()
        return True

    def get_employee(self, employee_id: str) -> Optional[StaffRecord]:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None

    def authenticate(self, username: str, password: str) -> Optional[StaffRecord]:
        """Plain credential comparison against the roster"""
        for employee in self.employees:
            if employee.username and employee.username == username and employee.password == password:
                return employee
        return None

    def register(self, name: str, role: str, email: str, username: str, password: str) -> StaffRecord:
        return self.add_employee(
            StaffRecord.create(name=name, role=role, email=email, username=username, password=password)
        )

    def update_profile(self, employee_id: str, avatar_url: Optional[str] = None,
                       password: Optional[str] = None) -> Optional[StaffRecord]:
        employee = self.get_employee(employee_id)
        if employee is None:
            return None
        # Fields left as None keep their current value
        changes = {"avatar_url": avatar_url, "password": password}
        updated = employee.model_copy(update={k: v for k, v in changes.items() if v is not None})
        self.update_employee(updated)
        return updated

    def send_notification(self, employee_id: str, message: str, sender: str = "Admin") -> Optional[StaffNotification]:
        """Prepend a message to an employee's inbox"""
        employee = self.get_employee(employee_id)
        if employee is None or not message.strip():
            return None
        notification = StaffNotification.create(message, sender=sender)
        self.update_employee(employee.model_copy(update={"notifications": [notification, *employee.notifications]}))
        return notification

    def mark_notification_read(self, employee_id: str, notification_id: str) -> bool:
        employee = self.get_employee(employee_id)
        if employee is None or not any(n.id == notification_id for n in employee.notifications):
            return False
        notifications = [
            n.model_copy(update={"is_read": True}) if n.id == notification_id else n
            for n in employee.notifications
        ]
        return self.update_employee(employee.model_copy(update={"notifications": notifications}))

    # ===== DASHBOARD =====

    def inventory_metrics(self) -> InventoryMetrics:
        units_by_type = {
            stock_type.value: sum(t.stock_quantity for t in self.tiles if t.type == stock_type)
            for stock_type in StockType
        }
        # Ties go to the first category in enum order
        top_category = max(units_by_type, key=lambda name: units_by_type[name])
        return InventoryMetrics(
            total_stock_value=sum(t.stock_value for t in self.tiles),
            total_stock_units=sum(t.stock_quantity for t in self.tiles),
            total_volume_sold=sum(c.purchased_volume or 0 for c in self.customers),
            units_by_type=units_by_type,
            top_category=top_category,
        )

    async def flush(self) -> None:
        """Wait for queued saves (e.g. before shutdown)"""
        await self.engine.flush()

