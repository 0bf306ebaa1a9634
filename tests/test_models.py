from datetime import date

import pytest
from pydantic import ValidationError

from tilemaster.models import (
    CustomerRecord,
    EmploymentStatus,
    PrivilegeLevel,
    StaffNotification,
    StaffRecord,
    StockItem,
    StockType,
    privilege_for_role,
)


class TestStockItem:

    def test_payload_uses_camel_case(self):
        tile = StockItem(id="1", name="Carrara White", type=StockType.WOOD_LOOK, size="20x120cm",
                         price=30, stock_quantity=12, image_url="https://example.com/a.jpg")
        payload = tile.to_payload()
        assert payload["stockQuantity"] == 12
        assert payload["imageUrl"] == "https://example.com/a.jpg"
        assert payload["type"] == "Wood Look"
        assert tile.to_row() == {"id": "1", "json_data": payload}

    def test_from_row_prefers_column_id(self):
        row = {"id": "row-id", "json_data": {"id": "payload-id", "name": "Nero", "stockQuantity": 3}}
        tile = StockItem.from_row(row)
        assert tile.id == "row-id"
        assert tile.stock_quantity == 3

    def test_unknown_payload_fields_survive(self):
        row = {"id": "1", "json_data": {"name": "Nero", "supplier": "Cava Srl"}}
        assert StockItem.from_row(row).to_payload()["supplier"] == "Cava Srl"

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            StockItem(id="1", price=-1)
        with pytest.raises(ValidationError):
            StockItem(id="1", stock_quantity=-5)

    def test_invalid_row_is_kept_verbatim(self):
        payload = {"name": "Nero", "price": -1, "supplier": "Cava Srl"}
        tile = StockItem.from_row({"id": "t9", "json_data": payload})

        assert tile.is_raw
        assert tile.id == "t9"
        assert tile.to_row() == {"id": "t9", "json_data": payload}

    def test_edits_to_a_raw_record_are_written_over_it(self):
        tile = StockItem.from_row({"id": "t9", "json_data": {"name": "Nero", "price": -1}})
        edited = tile.model_copy(update={"price": 20.0})
        assert edited.to_payload() == {"name": "Nero", "price": 20.0}

    def test_fractional_quantity_accepted(self):
        assert StockItem(id="1", stock_quantity=12.5).stock_quantity == 12.5
        assert StockItem(id="1", stock_quantity=4).to_payload()["stockQuantity"] == 4

    def test_create_generates_id_and_image(self):
        a = StockItem.create("Calacatta", StockType.MARBLE, "60x60cm", price=80, stock_quantity=10)
        b = StockItem.create("Calacatta", StockType.MARBLE, "60x60cm")
        assert a.id and a.id != b.id
        assert a.image_url.startswith("https://picsum.photos/400/400?random=")
        assert a.stock_value == 800


class TestCustomerRecord:

    def test_meeting_date_must_be_padded_iso(self):
        assert CustomerRecord(id="1", meeting_date="2026-03-05").meeting_date == "2026-03-05"
        with pytest.raises(ValidationError):
            CustomerRecord(id="1", meeting_date="2026-3-5")
        with pytest.raises(ValidationError):
            CustomerRecord(id="1", meeting_date="2026-02-30")

    def test_blank_meeting_date_is_none(self):
        assert CustomerRecord(id="1", meetingDate="").meeting_date is None

    def test_create_fills_meeting_date_when_agenda_given(self):
        customer = CustomerRecord.create("Ada", meeting_info="Bathroom quote", assigned_to="e1",
                                         today=date(2026, 10, 18))
        assert customer.meeting_date == "2026-10-18"
        assert customer.assigned_to == "e1"

    def test_create_without_agenda_leaves_date_empty(self):
        assert CustomerRecord.create("Ada", meeting_info="  ").meeting_date is None

    def test_optional_fields_are_omitted_from_payload(self):
        payload = CustomerRecord(id="1", name="Ada").to_payload()
        assert "assignedTo" not in payload
        assert payload["totalSpent"] == 0


class TestStaffRecord:

    @pytest.mark.parametrize("role,expected", [
        ("Store Admin", PrivilegeLevel.ADMIN),
        ("Sales Manager", PrivilegeLevel.MANAGER),
        ("ADMINISTRATOR", PrivilegeLevel.ADMIN),
        ("Sales Associate", PrivilegeLevel.STAFF),
        ("", PrivilegeLevel.STAFF),
    ])
    def test_privilege_for_role(self, role, expected):
        assert privilege_for_role(role) == expected

    def test_privilege_derived_on_creation(self):
        manager = StaffRecord.create("Lena", "Showroom Manager", today=date(2026, 1, 9))
        assert manager.privilege == PrivilegeLevel.MANAGER
        assert manager.is_privileged
        assert manager.join_date == "1/9/2026"
        assert manager.status == EmploymentStatus.ACTIVE
        assert manager.notifications == []

    def test_stored_privilege_is_not_rederived(self):
        row = {"id": "e1", "json_data": {"name": "Kai", "role": "Admin", "privilege": "Staff"}}
        assert StaffRecord.from_row(row).privilege == PrivilegeLevel.STAFF

    def test_legacy_payload_without_privilege(self):
        row = {"id": "e1", "json_data": {"name": "Kai", "role": "admin", "status": "On Leave"}}
        staff = StaffRecord.from_row(row)
        assert staff.privilege == PrivilegeLevel.ADMIN
        assert staff.status == EmploymentStatus.ON_LEAVE

    def test_notifications_round_trip(self):
        note = StaffNotification.create("Stock count on Friday")
        staff = StaffRecord(id="e1", name="Kai", role="Sales", notifications=[note])
        payload = staff.to_payload()
        assert payload["notifications"][0]["isRead"] is False
        assert payload["notifications"][0]["date"].endswith("Z")
        assert StaffRecord.from_row({"id": "e1", "json_data": payload}) == staff
        assert staff.unread_count == 1
