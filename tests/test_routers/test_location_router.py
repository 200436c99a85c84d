import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from main import app
from core.database import get_db
from authz.deps import get_current_active_user


def loc(**overrides):
    fields = dict(id=1, org_id=1, name="Kadıköy", timezone="Europe/Istanbul")
    fields.update(overrides)
    return Obj(**fields)


class LocationRouterTests(unittest.TestCase):
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

    # --- LIST ---

    @patch("location.router.service.get_locations")
    def test_get_locations_happy_path(self, mock_get):
        mock_get.return_value = [loc()]
        resp = self.client.get("/api/locations")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), [{"id": 1, "org_id": 1, "name": "Kadıköy", "timezone": "Europe/Istanbul"}])
        self.assertEqual(mock_get.call_args.kwargs["org_id"], 1)

    # --- CREATE ---

    @patch("location.router.service.create_location")
    def test_create_location_with_timezone(self, mock_create):
        mock_create.return_value = loc(id=10, name="Mitte", timezone="Europe/Berlin")
        resp = self.client.post("/api/locations", json={"name": "Mitte", "timezone": "Europe/Berlin"})
        self.assertEqual(resp.status_code, 201, resp.text)
        internal = mock_create.call_args[0][1]
        self.assertEqual((internal.org_id, internal.timezone), (1, "Europe/Berlin"))

    @patch("location.router.service.create_location")
    def test_create_location_without_timezone_leaves_default_to_service(self, mock_create):
        mock_create.return_value = loc(id=11, name="Marina", timezone="Asia/Dubai")
        resp = self.client.post("/api/locations", json={"name": "Marina"})
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertIsNone(mock_create.call_args[0][1].timezone)
        self.assertEqual(resp.json()["timezone"], "Asia/Dubai")

    def test_create_location_422_if_client_sends_org_id(self):
        resp = self.client.post("/api/locations", json={"name": "Clinic", "org_id": 2})
        self.assertEqual(resp.status_code, 422)

    def test_create_location_422_unknown_timezone(self):
        resp = self.client.post("/api/locations", json={"name": "Clinic", "timezone": "Europe/Atlantis"})
        self.assertEqual(resp.status_code, 422)

    @patch("location.router.service.create_location")
    def test_create_location_409_duplicate_name(self, mock_create):
        mock_create.side_effect = IntegrityError("stmt", "params", Exception("dup"))
        resp = self.client.post("/api/locations", json={"name": "Kadıköy", "timezone": "Europe/Istanbul"})
        self.assertEqual(resp.status_code, 409, resp.text)
        self.assertEqual(resp.json()["detail"], "Location name already exists in this organization")

    # --- GET /{id} ---

    @patch("location.router.service.get_location_for_org")
    def test_get_location_404(self, mock_get_for_org):
        mock_get_for_org.return_value = None
        resp = self.client.get("/api/locations/999")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["detail"], "Location not found")

    # --- PATCH /{id} ---

    @patch("location.router.service.update_location")
    @patch("location.router.service.get_location_for_org")
    def test_update_location_200(self, mock_get_for_org, mock_update):
        mock_get_for_org.return_value = loc()
        mock_update.return_value = loc(name="Kadıköy Moda")
        resp = self.client.patch("/api/locations/1", json={"name": "Kadıköy Moda"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["name"], "Kadıköy Moda")

    @patch("location.router.service.update_location")
    @patch("location.router.service.get_location_for_org")
    def test_update_location_409(self, mock_get_for_org, mock_update):
        mock_get_for_org.return_value = loc()
        mock_update.side_effect = IntegrityError("stmt", "params", Exception("dup"))
        resp = self.client.patch("/api/locations/1", json={"name": "Beşiktaş"})
        self.assertEqual(resp.status_code, 409)

    # --- DELETE /{id} ---

    @patch("location.router.service.delete_location")
    @patch("location.router.service.get_location_for_org")
    def test_delete_location_200(self, mock_get_for_org, mock_delete):
        mock_get_for_org.return_value = loc()
        resp = self.client.delete("/api/locations/1")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {"message": "Location deleted"})
        mock_delete.assert_called_once()
        self.assertEqual(mock_delete.call_args[0][1:], (1, 1))

    @patch("location.router.service.get_location_for_org")
    def test_delete_location_404_missing(self, mock_get_for_org):
        mock_get_for_org.return_value = None
        resp = self.client.delete("/api/locations/999")
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()
