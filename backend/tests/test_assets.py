"""Tests for asset CRUD, batch creation and the CSV export/import."""

import csv
import io

from uam.models import Asset, AssetStatus
from uam.services.asset_export import CSV_EXPORT_COLUMNS


def asset_payload(seed, **overrides):
    data = {
        "product_name": "Monitor",
        "inventory_code": "INV-100",
        "serial_number": "SN-100",
        "current_section_id": seed.it_section_id,
        "current_location_id": seed.office_location_id,
        "status": "in_use",
        "purchase_date": "2025-05-10",
    }
    data.update(overrides)
    return data


def csv_upload(text, filename="assets.csv"):
    return {"file": (filename, text.encode("utf-8"), "text/csv")}


IMPORT_HEADER = "product_name,inventory_code,serial_number,current_section_name,current_location_name,supplier_company_tax_id,status\n"


class TestAssetCrud:

    def test_create_and_read(self, client, seed, auth_headers):
        response = client.post("/api/assets", json=asset_payload(seed), headers=auth_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["current_section_name"] == "IT"
        assert body["current_location_name"] == "Office-1"

        fetched = client.get(f"/api/assets/{body['id']}", headers=auth_headers)
        assert fetched.json()["inventory_code"] == "INV-100"

    def test_duplicate_inventory_code_conflicts(self, client, seed, auth_headers):
        response = client.post(
            "/api/assets", json=asset_payload(seed, inventory_code="INV-001"), headers=auth_headers
        )
        assert response.status_code == 409

    def test_duplicate_serial_conflicts(self, client, seed, auth_headers):
        response = client.post("/api/assets", json=asset_payload(seed, serial_number="SN-001"), headers=auth_headers)
        assert response.status_code == 409

    def test_location_must_belong_to_section(self, client, seed, auth_headers):
        response = client.post(
            "/api/assets",
            json=asset_payload(seed, current_location_id=seed.shelf_location_id),
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_disposed_asset_has_no_placement(self, client, seed, auth_headers):
        response = client.post("/api/assets", json=asset_payload(seed, status="disposed"), headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["current_section_id"] is None
        assert response.json()["current_location_id"] is None

    def test_update(self, client, seed, auth_headers):
        response = client.put(
            f"/api/assets/{seed.asset_id}",
            json=asset_payload(seed, inventory_code="INV-001", serial_number="SN-001", status="under_repair"),
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "under_repair"

    def test_disposed_asset_cannot_be_reactivated(self, client, seed, auth_headers, session_factory):
        created = client.post(
            "/api/assets", json=asset_payload(seed, status="disposed"), headers=auth_headers
        ).json()
        response = client.put(
            f"/api/assets/{created['id']}", json=asset_payload(seed, status="in_use"), headers=auth_headers
        )
        assert response.status_code == 409
        with session_factory() as s:
            asset = s.get(Asset, created["id"])
            assert asset.status == AssetStatus.DISPOSED
            assert asset.current_section_id is None

    def test_disposed_asset_keeps_no_placement_on_update(self, client, seed, auth_headers):
        created = client.post(
            "/api/assets", json=asset_payload(seed, status="disposed"), headers=auth_headers
        ).json()
        response = client.put(
            f"/api/assets/{created['id']}",
            json=asset_payload(seed, status="disposed", description="Scrapped"),
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["description"] == "Scrapped"
        assert response.json()["current_section_id"] is None

    def test_soft_delete(self, client, seed, auth_headers, session_factory):
        assert client.delete(f"/api/assets/{seed.asset_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/assets/{seed.asset_id}", headers=auth_headers).status_code == 404
        assert client.get("/api/assets", headers=auth_headers).json() == []
        with session_factory() as s:
            assert s.get(Asset, seed.asset_id).deleted_at is not None

    def test_list_filters(self, client, seed, auth_headers):
        client.post("/api/assets", json=asset_payload(seed, status="in_storage"), headers=auth_headers)
        in_use = client.get("/api/assets", params={"status": "in_use"}, headers=auth_headers).json()
        assert [a["inventory_code"] for a in in_use] == ["INV-001"]
        searched = client.get("/api/assets", params={"search": "monit"}, headers=auth_headers).json()
        assert [a["inventory_code"] for a in searched] == ["INV-100"]


class TestAssetBatch:

    def test_creates_one_asset_per_serial(self, client, seed, auth_headers):
        common = asset_payload(seed, inventory_code="INV-200")
        common.pop("serial_number")
        response = client.post(
            "/api/assets/batch",
            json={"common_data": common, "serial_numbers": ["A1", "A2", "A3"]},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert [(a["serial_number"], a["inventory_code"]) for a in response.json()] == [
            ("A1", "INV-200-1"), ("A2", "INV-200-2"), ("A3", "INV-200-3"),
        ]

    def test_all_or_nothing(self, client, seed, auth_headers, session_factory):
        common = asset_payload(seed, inventory_code="INV-300")
        common.pop("serial_number")
        response = client.post(
            "/api/assets/batch",
            json={"common_data": common, "serial_numbers": ["B1", "SN-001"]},
            headers=auth_headers,
        )
        assert response.status_code == 409
        with session_factory() as s:
            assert s.query(Asset).count() == 1

    def test_repeated_serials_are_rejected(self, client, seed, auth_headers):
        common = asset_payload(seed, inventory_code="INV-400")
        common.pop("serial_number")
        response = client.post(
            "/api/assets/batch",
            json={"common_data": common, "serial_numbers": ["C1", "C1"]},
            headers=auth_headers,
        )
        assert response.status_code == 400


class TestCsvExport:

    def test_fixed_columns(self, client, seed, auth_headers):
        response = client.post("/api/assets/export/csv", json={}, headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == CSV_EXPORT_COLUMNS
        record = dict(zip(rows[0], rows[1]))
        assert record["inventory_code"] == "INV-001"
        assert record["current_section_name"] == "IT"
        assert record["current_location_name"] == "Office-1"
        assert record["supplier_company_tax_id"] == "210000000011"
        assert record["status"] == "in_use"

    def test_filters_and_sort(self, client, seed, auth_headers):
        client.post(
            "/api/assets",
            json=asset_payload(seed, product_name="Zebra printer", status="in_storage", purchase_date="2024-01-01"),
            headers=auth_headers,
        )
        response = client.post(
            "/api/assets/export/csv",
            json={"sort": {"column": "product_name", "direction": "descending"}},
            headers=auth_headers,
        )
        names = [row["product_name"] for row in csv.DictReader(io.StringIO(response.text))]
        assert names == ["Zebra printer", "Laptop"]

        by_status = client.post(
            "/api/assets/export/csv",
            json={"filters": {"search_text": "in storage", "search_attribute": "status"}},
            headers=auth_headers,
        )
        assert [r["product_name"] for r in csv.DictReader(io.StringIO(by_status.text))] == ["Zebra printer"]

        by_date = client.post(
            "/api/assets/export/csv",
            json={"filters": {"purchase_date_from": "2024-06-01"}},
            headers=auth_headers,
        )
        assert by_date.status_code == 404

    def test_unknown_sort_column_falls_back(self, client, seed, auth_headers):
        response = client.post(
            "/api/assets/export/csv", json={"sort": {"column": "id; DROP TABLE assets"}}, headers=auth_headers
        )
        assert response.status_code == 200

    def test_nothing_matches(self, client, seed, auth_headers):
        response = client.post(
            "/api/assets/export/csv", json={"filters": {"status": ["lost"]}}, headers=auth_headers
        )
        assert response.status_code == 404


class TestCsvImport:

    def test_all_rows_imported(self, client, seed, auth_headers, session_factory):
        text = IMPORT_HEADER + "Printer,INV-500,SN-500,Warehouse,Shelf-3,210000000011,\n"
        response = client.post("/api/assets/import-csv", files=csv_upload(text), headers=auth_headers)
        assert response.status_code == 201
        body = response.json()
        assert body["success_count"] == 1

        with session_factory() as s:
            asset = s.get(Asset, body["created_asset_ids"][0])
            assert asset.status == AssetStatus.IN_STORAGE
            assert asset.current_location_id == seed.shelf_location_id
            assert asset.supplier_company_id == seed.supplier_id

    def test_disposed_row_has_no_placement(self, client, seed, auth_headers, session_factory):
        text = IMPORT_HEADER + "Old PC,INV-900,,IT,Office-1,,disposed\n"
        response = client.post("/api/assets/import-csv", files=csv_upload(text), headers=auth_headers)
        assert response.status_code == 201

        with session_factory() as s:
            asset = s.get(Asset, response.json()["created_asset_ids"][0])
            assert asset.status == AssetStatus.DISPOSED
            assert asset.current_section_id is None
            assert asset.current_location_id is None

    def test_partial_success(self, client, seed, auth_headers, session_factory):
        text = (
            IMPORT_HEADER
            + "Printer,INV-500,,Warehouse,,,in_use\n"
            + "Scanner,INV-001,,Warehouse,,,\n"
            + "Router,INV-502,,Nowhere,,,\n"
            + "Switch,INV-503,,Warehouse,Office-1,,\n"
        )
        response = client.post("/api/assets/import-csv", files=csv_upload(text), headers=auth_headers)
        assert response.status_code == 207
        body = response.json()
        assert body["success_count"] == 1
        assert [e["row"] for e in body["errors"]] == [3, 4, 5]
        assert "INV-001" in body["errors"][0]["messages"][0]
        with session_factory() as s:
            assert s.query(Asset).count() == 2

    def test_all_rows_failing_rolls_back(self, client, seed, auth_headers, session_factory):
        text = IMPORT_HEADER + "Router,INV-600,,Nowhere,,,\n" + ",INV-601,,IT,,,\n"
        response = client.post("/api/assets/import-csv", files=csv_upload(text), headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error_count"] == 2
        with session_factory() as s:
            assert s.query(Asset).count() == 1

    def test_semicolon_separated(self, client, seed, auth_headers):
        text = "product_name;inventory_code;current_section_name\nPrinter;INV-700;IT\n"
        response = client.post("/api/assets/import-csv", files=csv_upload(text), headers=auth_headers)
        assert response.status_code == 201

    def test_export_can_be_reimported(self, client, seed, auth_headers):
        exported = client.post("/api/assets/export/csv", json={}, headers=auth_headers).text
        client.delete(f"/api/assets/{seed.asset_id}", headers=auth_headers)
        response = client.post("/api/assets/import-csv", files=csv_upload(exported), headers=auth_headers)
        assert response.status_code == 201

    def test_non_csv_is_rejected(self, client, seed, auth_headers):
        response = client.post(
            "/api/assets/import-csv",
            files={"file": ("assets.xlsx", b"binary", "application/octet-stream")},
            headers=auth_headers,
        )
        assert response.status_code == 400
