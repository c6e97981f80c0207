"""Unit tests for dashboard statistics."""

from datetime import datetime

from mediflow.derivation.dashboard import (
    appointment_statistics,
    compute_dashboard,
    recent_patients,
    todays_visits,
)


class TestComputeDashboard:
    """Test suite for dashboard KPIs."""

    def test_fixture_kpis(self, store, now):
        """Test KPIs over the clinic fixture."""
        # Act
        stats = compute_dashboard(store.patients, store.visits, now)

        # Assert
        assert stats.total_patients == 3
        assert stats.active_visits == 2
        assert stats.visits_today == 1
        assert stats.pending_lab_orders == 2
        assert stats.inpatient_visits == 2
        assert stats.outpatient_visits == 1
        assert stats.emergency_visits == 1
        assert stats.total_visits == 4

    def test_empty_collections_give_zeroes(self, now):
        """Test no patients and no visits."""
        # Act
        stats = compute_dashboard([], [], now)

        # Assert
        assert all(value == 0 for value in stats.to_dict().values())

    def test_tiles(self, store, now):
        """Test tile labels and details."""
        # Act
        tiles = compute_dashboard(store.patients, store.visits, now).to_tiles()

        # Assert
        assert [t.label for t in tiles] == [
            "Total Patients",
            "Active Visits",
            "Pending Lab Orders",
            "Total Visits",
        ]
        assert tiles[0].detail == "3 registered"
        assert tiles[1].value == "2"
        assert tiles[1].detail == "1 today"
        assert tiles[3].detail == "2 IPD"

    def test_today_follows_reference_time(self, store):
        """Test that "today" is the day of now, not the wall clock."""
        # Act
        visits = todays_visits(store.visits, datetime(2024, 3, 14, 23, 0))

        # Assert
        assert [v.id for v in visits] == ["V3"]


class TestRecentPatients:
    """Test suite for the recent patients panel."""

    def test_first_three_in_supplied_order(self, store):
        """Test the panel takes a prefix of the list."""
        assert [p.id for p in recent_patients(store.patients)] == ["P1", "P2", "P3"]
        assert [p.id for p in recent_patients(store.patients, limit=1)] == ["P1"]


class TestAppointmentStatistics:
    """Test suite for appointment tiles."""

    def test_fixture_statistics(self, store, now):
        """Test counts per status and for today."""
        # Act
        stats = appointment_statistics(store.appointments, now)

        # Assert
        assert stats.to_dict() == {
            "total": 5,
            "today": 2,
            "scheduled": 3,
            "confirmed": 1,
            "checked_in": 0,
            "completed": 0,
            "cancelled": 1,
        }
