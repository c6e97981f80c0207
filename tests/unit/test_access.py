"""Unit tests for role-based menu and order-tab visibility."""

import pytest

from mediflow.derivation.access import visible_menu_items, visible_order_types
from mediflow.models import Role


class TestVisibleMenuItems:
    """Test suite for sidebar visibility."""

    def test_admin_sees_everything(self):
        """Test the administrator sees every menu item."""
        assert [item.id for item in visible_menu_items(Role.ADMIN)] == [
            "dashboard",
            "patients",
            "visits",
            "appointments",
            "orders",
            "vitals",
            "reports",
            "billing",
            "settings",
        ]

    def test_lab_tech_menu(self):
        """Test a lab technician sees shared items plus orders."""
        assert [item.id for item in visible_menu_items(Role.LAB_TECH)] == [
            "dashboard",
            "patients",
            "appointments",
            "orders",
        ]

    def test_receptionist_menu(self):
        """Test a receptionist sees visits and billing but not orders."""
        ids = [item.id for item in visible_menu_items(Role.RECEPTIONIST)]

        assert "billing" in ids
        assert "visits" in ids
        assert "orders" not in ids
        assert "settings" not in ids


class TestVisibleOrderTypes:
    """Test suite for order tabs."""

    @pytest.mark.parametrize(
        "role,expected",
        [
            (Role.LAB_TECH, ["lab"]),
            (Role.PHARMACIST, ["medication"]),
            (Role.RADIOLOGIST, ["radiology"]),
            (Role.DOCTOR, ["all", "lab", "medication", "radiology"]),
            (Role.NURSE, ["all", "lab", "medication", "radiology"]),
            (Role.RECEPTIONIST, ["all"]),
        ],
    )
    def test_order_tabs_per_role(self, role, expected):
        """Test which order tabs each role sees."""
        assert visible_order_types(role) == expected
