"""Unit tests for the attending staff roster."""

from mediflow.derivation.roster import build_staff_roster
from mediflow.models import Role, StaffRef


class TestBuildStaffRoster:
    """Test suite for build_staff_roster."""

    def test_fixture_patient_roster(self, store):
        """Test deduplication across the first patient's two visits."""
        # Act
        roster = build_staff_roster(store.visits_for_patient("P1"))

        # Assert
        assert [(e.person_id, e.role) for e in roster] == [
            ("D1", Role.DOCTOR),
            ("D2", Role.DOCTOR),
            ("N1", Role.NURSE),
        ]
        okafor = roster.entries[0]
        assert okafor.name == "Sarah Okafor"
        assert okafor.visit_count == 2
        assert okafor.visit_numbers == ["VS-2024-000001", "VS-2024-000002"]

    def test_total_assignments_equals_sum_of_assignment_lists(self, store):
        """Test visit counts add up to every doctor and nurse assignment."""
        # Arrange
        visits = store.visits_for_patient("P1")

        # Act
        roster = build_staff_roster(visits)

        # Assert
        assert roster.total_assignments == sum(
            len(v.assigned_doctors) + len(v.assigned_nurses) for v in visits
        )

    def test_no_visits_gives_empty_roster(self):
        """Test an empty visit list."""
        roster = build_staff_roster([])

        assert len(roster) == 0
        assert roster.doctors == []
        assert roster.nurses == []

    def test_missing_name_falls_back_to_role_label(self, make_visit):
        """Test unnamed references get "Doctor <id>" or "Nurse <id>"."""
        # Arrange
        visit = make_visit(
            assigned_doctors=[StaffRef(id="D9")], assigned_nurses=[StaffRef(id="N9")]
        )

        # Act
        roster = build_staff_roster([visit])

        # Assert
        assert [e.name for e in roster] == ["Doctor D9", "Nurse N9"]

    def test_same_id_under_both_roles_gives_two_entries(self, make_visit):
        """Test entries are keyed by role and id."""
        # Arrange
        visit = make_visit(
            assigned_doctors=[StaffRef(id="S1", name="Sam Doe")],
            assigned_nurses=[StaffRef(id="S1", name="Sam Doe")],
        )

        # Act
        roster = build_staff_roster([visit])

        # Assert
        assert len(roster) == 2
        assert len(roster.doctors) == 1
        assert len(roster.nurses) == 1

    def test_first_seen_name_is_kept(self, make_visit):
        """Test later references do not rename an entry."""
        # Arrange
        first = make_visit("V1", "VS-2024-000001", assigned_doctors=[StaffRef("D1", "Dr. A")])
        second = make_visit("V2", "VS-2024-000002", assigned_doctors=[StaffRef("D1", "A. B.")])

        # Act
        roster = build_staff_roster([first, second])

        # Assert
        assert roster.entries[0].name == "Dr. A"
        assert roster.entries[0].to_dict()["visit_count"] == 2
