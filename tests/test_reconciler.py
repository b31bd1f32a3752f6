"""Tests for filtering, deduplication and enrichment of availability rows."""

import pytest

from fleetblock.locations import Location
from fleetblock.models import AvailabilityRow, VehicleMetadata
from fleetblock.reconciler import deduplicate, filter_blocked, reconcile


def rows_from(builders, *specs):
    return [AvailabilityRow.model_validate(builders.row(**spec)) for spec in specs]


def vehicles_from(builders, *carids):
    return [VehicleMetadata.model_validate(builders.car(carid)) for carid in carids]


class TestTypeFilter:
    @pytest.mark.parametrize("type_id", [0, 1, 2, 4, 5])
    def test_non_maintenance_rows_never_appear(self, builders, type_id):
        rows = rows_from(
            builders,
            {"reservationno": 1, "reservationtypeid": type_id},
            {"reservationno": 2, "reservationtypeid": 3},
        )
        result = reconcile(rows, [], 0)
        assert [r.reservationno for r in result] == [2]
        assert all(r.reservationtypeid == 3 for r in result)

    def test_filter_blocked(self, builders):
        rows = rows_from(builders, {"reservationtypeid": 1}, {"reservationtypeid": 3})
        assert len(filter_blocked(rows)) == 1


class TestDeduplication:
    def test_identity_key(self, builders):
        with_res, with_buf = rows_from(
            builders,
            {"reservationno": 12, "resbufferno": 99},
            {"reservationno": 0, "resbufferno": 99},
        )
        assert with_res.identity_key == "res-12"
        assert with_buf.identity_key == "buf-99"

    def test_first_occurrence_wins(self, builders):
        rows = rows_from(
            builders,
            {"reservationno": 5, "aclastname": "first"},
            {"reservationno": 0, "resbufferno": 7},
            {"reservationno": 5, "aclastname": "second"},
            {"reservationno": 0, "resbufferno": 7},
            {"reservationno": 0, "resbufferno": 8},
        )
        unique = deduplicate(rows)
        assert [r.identity_key for r in unique] == ["res-5", "buf-7", "buf-8"]
        assert unique[0].aclastname == "first"

    def test_reservation_and_buffer_keys_do_not_collide(self, builders):
        rows = rows_from(
            builders,
            {"reservationno": 7, "resbufferno": 0},
            {"reservationno": 0, "resbufferno": 7},
        )
        assert len(reconcile(rows, [], 0)) == 2

    def test_reconcile_is_idempotent(self, builders):
        rows = rows_from(
            builders,
            {"reservationno": 1, "carid": 1},
            {"reservationno": 1, "carid": 1},
            {"reservationno": 0, "resbufferno": 4, "carid": 2},
            {"reservationno": 0, "resbufferno": 4, "carid": 2},
            {"reservationno": 3, "carid": 9},
        )
        vehicles = vehicles_from(builders, 1, 2)

        once = reconcile(rows, vehicles, 9, category_id=47)
        twice = reconcile(once, vehicles, 9, category_id=47)

        assert len(once) == 3
        assert twice == once


class TestLocationFilter:
    def test_all_locations_keeps_every_row(self, builders):
        rows = rows_from(
            builders,
            {"reservationno": 1, "pickuplocation": "MEL", "dropofflocation": "MEL"},
            {"reservationno": 2, "pickuplocation": "SYD", "dropofflocation": "BNE"},
        )
        assert len(reconcile(rows, [], 0)) == 2

    def test_pickup_or_dropoff_match(self, builders):
        rows = rows_from(
            builders,
            {"reservationno": 1, "pickuplocation": "SYD", "dropofflocation": "MEL"},
            {"reservationno": 2, "pickuplocation": "MEL", "dropofflocation": "SYD"},
            {"reservationno": 3, "pickuplocation": "MEL", "dropofflocation": "BNE"},
        )
        result = reconcile(rows, [], 9)
        assert [r.reservationno for r in result] == [1, 2]

    def test_unknown_location_matches_nothing(self, builders):
        rows = rows_from(builders, {"reservationno": 1})
        assert reconcile(rows, [], 12345) == []

    def test_custom_location_table(self, builders):
        rows = rows_from(
            builders,
            {"reservationno": 1, "pickuplocation": "AKL", "dropofflocation": "AKL"},
        )
        table = (Location(locid=40, code="AKL", name="Auckland"),)
        assert len(reconcile(rows, [], 40, locations=table)) == 1
        assert reconcile(rows, [], 9, locations=table) == []


class TestEnrichment:
    def test_joins_vehicle_metadata(self, builders):
        rows = rows_from(builders, {"reservationno": 1, "carid": 2})
        result = reconcile(rows, vehicles_from(builders, 1, 2), 0, category_id=47)

        assert result[0].car_details is not None
        assert result[0].car_details.carid == 2
        assert result[0].car_details.fleetno == "F2"
        assert result[0].categoryid == 47

    def test_missing_metadata_is_null(self, builders):
        rows = rows_from(
            builders,
            {"reservationno": 1, "carid": 404},
            {"reservationno": 2, "carid": None},
        )
        result = reconcile(rows, vehicles_from(builders, 1), 0)
        assert [r.car_details for r in result] == [None, None]

    def test_unknown_backend_fields_are_kept(self, builders):
        rows = rows_from(builders, {"reservationno": 1, "isdonotmove": True, "branchnote": "bay 4"})
        result = reconcile(rows, [], 0)
        dumped = result[0].model_dump(by_alias=True)

        assert dumped["branchnote"] == "bay 4"
        assert dumped["isdonotmove"] is True
        assert "carDetails" in dumped

    def test_joins_metadata_with_numeric_text_fields(self, builders):
        rows = rows_from(builders, {"reservationno": 1, "carid": 3})
        vehicles = [
            VehicleMetadata.model_validate(
                {**builders.car(3), "fleetno": 123, "colour": 7, "year": ""}
            )
        ]

        result = reconcile(rows, vehicles, 9)

        assert result[0].car_details.fleetno == "123"
        assert result[0].car_details.year is None
