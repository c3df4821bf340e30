"""Tests for the asset transfer workflow (POST /api/assets/{id}/move)."""

import logging
from datetime import datetime

import pytest

from uam.models import Asset, AssetStatus, AssetTransfer
from uam.schemas.asset_transfer import AssetMoveRequest, MovementKind
from uam.services.asset_transfer import (
    AssetTransferService, TransferConflict, TransferForbidden, TransferNotFound
)
from tests.conftest import CALLER_NATIONAL_ID, RECEIVER_NATIONAL_ID, OTHER_NATIONAL_ID


def move_payload(**overrides):
    payload = {
        "target_section_name": "Warehouse",
        "target_location_name": "Shelf-3",
        "movement_kind": "internal",
        "authorizing_user_national_id": CALLER_NATIONAL_ID,
        "receiving_user_national_id": RECEIVER_NATIONAL_ID,
        "caller_section_name": "IT",
        "transfer_date": "2026-03-01T10:00:00Z",
        "received_date": "2026-03-01T12:30:00Z",
    }
    payload.update(overrides)
    return payload


def asset_state(session_factory, asset_id):
    with session_factory() as s:
        asset = s.get(Asset, asset_id)
        return asset.status, asset.current_section_id, asset.current_location_id


def transfer_count(session_factory):
    with session_factory() as s:
        return s.query(AssetTransfer).count()


# ============================================================
# END-TO-END
# ============================================================


class TestMoveAsset:

    def test_internal_move_relocates_asset_and_records_history(self, client, seed, auth_headers, session_factory):
        response = client.post(f"/api/assets/{seed.asset_id}/move", json=move_payload(), headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["asset_id"] == seed.asset_id
        assert body["transfer_id"] > 0

        assert asset_state(session_factory, seed.asset_id) == (
            AssetStatus.IN_USE, seed.warehouse_section_id, seed.shelf_location_id
        )
        with session_factory() as s:
            transfers = s.query(AssetTransfer).all()
            assert len(transfers) == 1
            transfer = transfers[0]
            assert transfer.id == body["transfer_id"]
            assert transfer.from_section_id == seed.it_section_id
            assert transfer.from_location_id == seed.office_location_id
            assert transfer.to_section_id == seed.warehouse_section_id
            assert transfer.to_location_id == seed.shelf_location_id
            assert transfer.authorized_by_user_id == seed.caller_id
            assert transfer.received_by_user_id == seed.receiver_id
            assert transfer.notes == "Movement type: Internal."

    def test_timestamps_stored_as_utc_seconds(self, client, seed, auth_headers, session_factory):
        payload = move_payload(
            transfer_date="2026-03-01T10:00:00.987654-03:00",
            received_date="2026-03-02T08:15:30Z",
        )
        response = client.post(f"/api/assets/{seed.asset_id}/move", json=payload, headers=auth_headers)
        assert response.status_code == 200

        with session_factory() as s:
            transfer = s.query(AssetTransfer).one()
            assert transfer.transfer_date == datetime(2026, 3, 1, 13, 0, 0)
            assert transfer.received_date == datetime(2026, 3, 2, 8, 15, 30)

    def test_external_move_keeps_status(self, client, seed, auth_headers, session_factory):
        response = client.post(
            f"/api/assets/{seed.asset_id}/move",
            json=move_payload(movement_kind="external"),
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert asset_state(session_factory, seed.asset_id) == (
            AssetStatus.IN_USE, seed.warehouse_section_id, seed.shelf_location_id
        )
        with session_factory() as s:
            assert s.query(AssetTransfer).one().notes == "Movement type: External."

    def test_disposal_clears_placement(self, client, seed, auth_headers, session_factory):
        response = client.post(
            f"/api/assets/{seed.asset_id}/move",
            json=move_payload(movement_kind="disposal"),
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert asset_state(session_factory, seed.asset_id) == (AssetStatus.DISPOSED, None, None)

        with session_factory() as s:
            transfer = s.query(AssetTransfer).one()
            assert transfer.from_section_id == seed.it_section_id
            assert transfer.to_section_id == seed.warehouse_section_id
            assert transfer.to_location_id == seed.shelf_location_id
            assert transfer.notes == "Movement type: Disposal."

    def test_from_placement_follows_each_move(self, client, seed, auth_headers, session_factory):
        first = client.post(f"/api/assets/{seed.asset_id}/move", json=move_payload(), headers=auth_headers)
        back = client.post(
            f"/api/assets/{seed.asset_id}/move",
            json=move_payload(
                target_section_name="IT",
                target_location_name="Office-1",
                caller_section_name="Warehouse",
                transfer_date="2026-03-05T09:00:00Z",
                received_date="2026-03-05T09:30:00Z",
            ),
            headers=auth_headers,
        )
        assert first.status_code == 200
        assert back.status_code == 200

        with session_factory() as s:
            second = s.get(AssetTransfer, back.json()["transfer_id"])
            assert second.from_section_id == seed.warehouse_section_id
            assert second.from_location_id == seed.shelf_location_id
            assert second.to_location_id == seed.office_location_id

    def test_history_is_newest_first(self, client, seed, auth_headers):
        client.post(f"/api/assets/{seed.asset_id}/move", json=move_payload(), headers=auth_headers)
        client.post(
            f"/api/assets/{seed.asset_id}/move",
            json=move_payload(
                target_section_name="IT",
                target_location_name="Office-1",
                transfer_date="2026-04-01T09:00:00Z",
            ),
            headers=auth_headers,
        )

        response = client.get(f"/api/assets/{seed.asset_id}/movements", headers=auth_headers)
        assert response.status_code == 200
        history = response.json()
        assert [m["transfer_date"] for m in history] == ["2026-04-01T09:00:00", "2026-03-01T10:00:00"]
        assert history[0]["from_section_name"] == "Warehouse"
        assert history[0]["to_location_name"] == "Office-1"
        assert history[1]["authorized_by_user_national_id"] == CALLER_NATIONAL_ID
        assert history[1]["received_by_user_name"] == "Bruno Silva"
        assert history[1]["received_by_user_section_name"] == "Warehouse"


# ============================================================
# FAILURES
# ============================================================


class TestMoveAssetFailures:

    def test_authorizer_must_be_caller(self, client, seed, auth_headers, session_factory):
        response = client.post(
            f"/api/assets/{seed.asset_id}/move",
            json=move_payload(authorizing_user_national_id=OTHER_NATIONAL_ID),
            headers=auth_headers,
        )
        assert response.status_code == 403
        assert asset_state(session_factory, seed.asset_id) == (
            AssetStatus.IN_USE, seed.it_section_id, seed.office_location_id
        )
        assert transfer_count(session_factory) == 0

    def test_forbidden_is_logged_as_warning(self, client, seed, auth_headers, caplog):
        with caplog.at_level(logging.WARNING, logger="uam.services.asset_transfer"):
            client.post(
                f"/api/assets/{seed.asset_id}/move",
                json=move_payload(authorizing_user_national_id=RECEIVER_NATIONAL_ID),
                headers=auth_headers,
            )
        assert any(r.levelno == logging.WARNING and "refused" in r.getMessage() for r in caplog.records)

    def test_location_of_other_section_is_not_found(self, client, seed, auth_headers, session_factory):
        # Office-1 exists, but only under IT
        response = client.post(
            f"/api/assets/{seed.asset_id}/move",
            json=move_payload(target_section_name="Warehouse", target_location_name="Office-1"),
            headers=auth_headers,
        )
        assert response.status_code == 404
        assert "Office-1" in response.json()["detail"]
        assert transfer_count(session_factory) == 0

    @pytest.mark.parametrize("overrides, fragment", [
        ({"caller_section_name": "Nowhere"}, "Origin section"),
        ({"target_section_name": "Nowhere"}, "Target section"),
        ({"target_location_name": "Shelf-99"}, "Shelf-99"),
        ({"authorizing_user_national_id": "0.000.000-0"}, "Authorizing user"),
        ({"receiving_user_national_id": "0.000.000-0"}, "Receiving user"),
    ])
    def test_unresolved_reference_leaves_store_unchanged(
        self, client, seed, auth_headers, session_factory, overrides, fragment
    ):
        response = client.post(
            f"/api/assets/{seed.asset_id}/move", json=move_payload(**overrides), headers=auth_headers
        )
        assert response.status_code == 404
        assert fragment in response.json()["detail"]
        assert asset_state(session_factory, seed.asset_id) == (
            AssetStatus.IN_USE, seed.it_section_id, seed.office_location_id
        )
        assert transfer_count(session_factory) == 0

    def test_unknown_asset(self, client, seed, auth_headers):
        response = client.post("/api/assets/9999/move", json=move_payload(), headers=auth_headers)
        assert response.status_code == 404

    def test_failed_audit_insert_undoes_asset_update(self, client, seed, auth_headers, session_factory, monkeypatch):
        def broken_transfer(**kwargs):
            raise RuntimeError("audit table unavailable")

        monkeypatch.setattr("uam.services.asset_transfer.AssetTransfer", broken_transfer)
        response = client.post(
            f"/api/assets/{seed.asset_id}/move", json=move_payload(), headers=auth_headers
        )
        assert response.status_code == 500
        assert response.json()["detail"] == "Internal error while moving the asset"
        assert asset_state(session_factory, seed.asset_id) == (
            AssetStatus.IN_USE, seed.it_section_id, seed.office_location_id
        )
        assert transfer_count(session_factory) == 0

    @pytest.mark.parametrize("overrides", [
        {"movement_kind": "teleport"},
        {"target_section_name": ""},
        {"receiving_user_national_id": None},
        {"transfer_date": "yesterday"},
    ])
    def test_invalid_body_is_rejected(self, client, seed, auth_headers, session_factory, overrides):
        response = client.post(
            f"/api/assets/{seed.asset_id}/move", json=move_payload(**overrides), headers=auth_headers
        )
        assert response.status_code == 422
        assert transfer_count(session_factory) == 0

    def test_requires_authentication(self, client, seed):
        response = client.post(f"/api/assets/{seed.asset_id}/move", json=move_payload())
        assert response.status_code == 401


# ============================================================
# SERVICE
# ============================================================


class TestAssetTransferService:

    def request(self, **overrides):
        return AssetMoveRequest(**move_payload(**overrides))

    def test_result_carries_placements(self, db, seed):
        result = AssetTransferService(db).move(seed.asset_id, self.request(), caller_id=seed.caller_id)

        assert result.from_placement.section_id == seed.it_section_id
        assert result.to_placement.location_id == seed.shelf_location_id
        assert result.status == AssetStatus.IN_USE

    def test_forbidden_rolls_back(self, db, seed, session_factory):
        with pytest.raises(TransferForbidden):
            AssetTransferService(db).move(seed.asset_id, self.request(), caller_id=seed.receiver_id)
        assert transfer_count(session_factory) == 0

    def test_missing_location_raises_not_found(self, db, seed):
        with pytest.raises(TransferNotFound):
            AssetTransferService(db).move(
                seed.asset_id, self.request(target_location_name="Nope"), caller_id=seed.caller_id
            )

    def test_soft_deleted_asset_is_not_found(self, db, seed):
        asset = db.get(Asset, seed.asset_id)
        asset.deleted_at = datetime(2026, 1, 1)
        db.commit()
        with pytest.raises(TransferNotFound):
            AssetTransferService(db).move(seed.asset_id, self.request(), caller_id=seed.caller_id)

    def test_update_without_matching_row_is_conflict(self, db, seed, monkeypatch, session_factory):
        service = AssetTransferService(db)
        asset = db.get(Asset, seed.asset_id)
        # Row is gone between the read and the update
        monkeypatch.setattr(service, "_get_asset", lambda asset_id: asset)
        with pytest.raises(TransferConflict):
            service.move(9999, self.request(), caller_id=seed.caller_id)
        assert transfer_count(session_factory) == 0

    def test_failed_flush_rolls_back_asset_update(self, db, seed, monkeypatch, session_factory, caplog):
        def broken_flush(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(db, "flush", broken_flush)
        with caplog.at_level(logging.ERROR, logger="uam.services.asset_transfer"):
            with pytest.raises(RuntimeError):
                AssetTransferService(db).move(seed.asset_id, self.request(), caller_id=seed.caller_id)

        assert asset_state(session_factory, seed.asset_id) == (
            AssetStatus.IN_USE, seed.it_section_id, seed.office_location_id
        )
        assert transfer_count(session_factory) == 0
        assert any(r.levelno == logging.ERROR and r.exc_info for r in caplog.records)

    def test_movement_kind_labels(self):
        assert MovementKind.INTERNAL.label == "Internal"
        assert MovementKind("disposal") is MovementKind.DISPOSAL
