import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from fastapi import HTTPException
from fastapi.testclient import TestClient

from main import app
from core.database import get_db
from authz.deps import get_current_active_user
from organization.schema import CompanySettingsSchema


def settings_row(**overrides):
    fields = dict(
        id=1, name="Kahve Evi", locale="tr-TR", currency="TRY", timezone="Europe/Istanbul",
        week_starts_on="mon", default_shift_start="09:00", default_shift_end="17:00",
        weekly_budget_limit=None,
    )
    fields.update(overrides)
    return CompanySettingsSchema(**fields)


class OrganizationRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def rollback(self): pass
        def _fake_db():
            yield FakeDB()

        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_active_user] = lambda: Obj(org_id=1)

        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_active_user, None)

    # --- CREATE ---

    @patch("organization.router.service.create_organization")
    def test_create_organization_201_default_timezone(self, mock_create):
        mock_create.return_value = Obj(id=3, name="Coffee Co", timezone="Europe/Istanbul")
        resp = self.client.post("/api/organizations", json={"name": "Coffee Co"})
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json(), {"id": 3, "name": "Coffee Co", "timezone": "Europe/Istanbul"})
        dto = mock_create.call_args[0][1]
        self.assertEqual(dto.timezone, "Europe/Istanbul")

    def test_create_organization_rejects_unknown_timezone(self):
        resp = self.client.post("/api/organizations", json={"name": "X", "timezone": "Nowhere/Land"})
        self.assertEqual(resp.status_code, 422)

    @patch("organization.router.service.create_organization")
    def test_create_organization_409(self, mock_create):
        mock_create.side_effect = HTTPException(status_code=409, detail="organization name already exists")
        resp = self.client.post("/api/organizations", json={"name": "Dupe"})
        self.assertEqual(resp.status_code, 409)

    # --- GET /me ---

    @patch("organization.router.service.get_organization")
    def test_get_my_organization_200(self, mock_get):
        mock_get.return_value = Obj(id=1, name="My Org", timezone="Europe/Istanbul")
        resp = self.client.get("/api/organizations/me")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["name"], "My Org")
        self.assertEqual(mock_get.call_args[0][1], 1)

    @patch("organization.router.service.get_organization")
    def test_get_my_organization_404(self, mock_get):
        mock_get.return_value = None
        resp = self.client.get("/api/organizations/me")
        self.assertEqual(resp.status_code, 404)

    # --- COMPANY SETTINGS ---

    @patch("organization.router.service.get_settings")
    def test_get_settings(self, mock_get):
        mock_get.return_value = settings_row(weekly_budget_limit=25000)
        resp = self.client.get("/api/company/settings")
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["currency"], "TRY")
        self.assertEqual(body["weekly_budget_limit"], 25000)

    @patch("organization.router.service.update_settings")
    def test_patch_settings_blank_budget_clears(self, mock_update):
        mock_update.return_value = settings_row()
        resp = self.client.patch("/api/company/settings", json={"weekly_budget_limit": ""})
        self.assertEqual(resp.status_code, 200, resp.text)
        patch_arg = mock_update.call_args[0][2]
        self.assertIsNone(patch_arg.weekly_budget_limit)
        self.assertIn("weekly_budget_limit", patch_arg.model_fields_set)

    def test_patch_settings_validation(self):
        for body in (
            {"weekly_budget_limit": -5},
            {"locale": "de-DE"},
            {"week_starts_on": "wed"},
            {"default_shift_start": "9"},
            {"unknown": 1},
        ):
            resp = self.client.patch("/api/company/settings", json=body)
            self.assertEqual(resp.status_code, 422, body)

    @patch("organization.router.service.update_settings")
    def test_patch_settings_empty_400(self, mock_update):
        mock_update.side_effect = HTTPException(status_code=400, detail="At least one field is required")
        resp = self.client.patch("/api/company/settings", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "At least one field is required")


if __name__ == "__main__":
    unittest.main()
