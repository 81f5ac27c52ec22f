"""
Tests for GET /api/permissions and the catalog seed.
"""
from fastapi.testclient import TestClient

from portal.crud.permission import MODULE_NAMES, get_module_name
from portal.models import Permission
from portal.seed.seed_data import PERMISSION_CATALOG, seed_permissions


class TestPermissionCatalog:

    def test_catalog_flat_and_grouped(self, client: TestClient, master_headers, permission_catalog):
        response = client.get("/api/permissions", headers=master_headers)

        assert response.status_code == 200
        data = response.json()["data"]

        codes = [p["code"] for p in data["list"]]
        assert codes == [code for code, _, _, _ in sorted(PERMISSION_CATALOG, key=lambda row: row[3])]
        assert set(data["list"][0]) >= {"id", "code", "name", "module", "sortOrder"}

        modules = [g["module"] for g in data["grouped"]]
        assert modules == list(dict.fromkeys(p["module"] for p in data["list"]))
        orders = next(g for g in data["grouped"] if g["module"] == "orders")
        assert orders["moduleName"] == MODULE_NAMES["orders"]
        assert [p["code"] for p in orders["permissions"]] == ["orders:view", "orders:create", "orders:edit"]

    def test_catalog_requires_login(self, client: TestClient):
        assert client.get("/api/permissions").status_code == 401

    def test_unknown_module_uses_raw_name(self):
        assert get_module_name("warehouse") == "warehouse"

    def test_seed_is_idempotent(self, test_db):
        seed_permissions(test_db)
        seed_permissions(test_db)

        assert test_db.query(Permission).count() == len(PERMISSION_CATALOG)
