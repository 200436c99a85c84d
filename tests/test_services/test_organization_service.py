import unittest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi import HTTPException
from pydantic import ValidationError

from core.database import Base
import models_bootstrap
from organization.models import Organization
from organization.service import create_organization, get_organization, get_settings, update_settings
from organization.schema import CompanySettingsUpdate, OrganizationCreate


class OrganizationServiceTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # In-memory SQLite for speed & isolation
        cls.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(cls.engine)
        cls.SessionLocal = sessionmaker(bind=cls.engine, autoflush=False, autocommit=False, future=True)

    @classmethod
    def tearDownClass(cls):
        cls.engine.dispose()

    def setUp(self):
        self.db = self.SessionLocal()

    def tearDown(self):
        # Clean tables between tests
        for tbl in reversed(Base.metadata.sorted_tables):
            self.db.execute(tbl.delete())
        self.db.commit()
        self.db.close()

    # ---------- Helpers ----------
    def _seed(self, name="Kahve Evi", **fields):
        org = Organization(name=name, **fields)
        self.db.add(org)
        self.db.commit()
        self.db.refresh(org)
        return org

    # ---------- organizations ----------
    def test_create_ok(self):
        obj = create_organization(self.db, OrganizationCreate(name="Coffee Co"))
        self.assertIsInstance(obj.id, int)
        self.assertEqual(obj.timezone, "Europe/Istanbul")

    def test_create_duplicate_name_409(self):
        self._seed(name="Dupe Inc")
        with self.assertRaises(HTTPException) as ctx:
            create_organization(self.db, OrganizationCreate(name="Dupe Inc"))
        self.assertEqual(ctx.exception.status_code, 409)

    def test_get_organization(self):
        org = self._seed(name="Target")
        self.assertEqual(get_organization(self.db, org.id).name, "Target")
        self.assertIsNone(get_organization(self.db, 999999))

    # ---------- settings ----------
    def test_settings_defaults(self):
        org = self._seed(timezone=None)
        s = get_settings(self.db, org.id)
        self.assertEqual(s.locale, "tr-TR")
        self.assertEqual(s.currency, "TRY")
        self.assertEqual(s.timezone, "Europe/Istanbul")
        self.assertEqual(s.week_starts_on, "mon")
        self.assertEqual((s.default_shift_start, s.default_shift_end), ("09:00", "17:00"))
        self.assertIsNone(s.weekly_budget_limit)

    def test_settings_normalize_stored_values(self):
        org = self._seed(week_starts_on="sun", default_shift_start="7:30", default_shift_end="bogus",
                         weekly_budget_limit=-10)
        s = get_settings(self.db, org.id)
        self.assertEqual(s.week_starts_on, "sun")
        self.assertEqual(s.default_shift_start, "07:30")
        self.assertEqual(s.default_shift_end, "17:00")
        self.assertIsNone(s.weekly_budget_limit)

    def test_settings_not_found(self):
        with self.assertRaises(HTTPException) as ctx:
            get_settings(self.db, 999999)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_update_partial(self):
        org = self._seed()
        s = update_settings(self.db, org.id, CompanySettingsUpdate(currency="USD", weekly_budget_limit=5000))
        self.assertEqual(s.currency, "USD")
        self.assertEqual(s.weekly_budget_limit, 5000)
        self.assertEqual(s.locale, "tr-TR")

    def test_update_clears_budget_with_blank(self):
        org = self._seed(weekly_budget_limit=100)
        s = update_settings(self.db, org.id, CompanySettingsUpdate(weekly_budget_limit=""))
        self.assertIsNone(s.weekly_budget_limit)

    def test_update_ignores_other_nulls(self):
        org = self._seed(locale="en-US")
        s = update_settings(self.db, org.id, CompanySettingsUpdate(locale=None, currency="EGP"))
        self.assertEqual(s.locale, "en-US")
        self.assertEqual(s.currency, "EGP")

    def test_update_empty_400(self):
        org = self._seed()
        for patch in (CompanySettingsUpdate(), CompanySettingsUpdate(locale=None)):
            with self.assertRaises(HTTPException) as ctx:
                update_settings(self.db, org.id, patch)
            self.assertEqual(ctx.exception.status_code, 400)

    def test_update_validation(self):
        with self.assertRaises(ValidationError):
            CompanySettingsUpdate(weekly_budget_limit=-1)
        with self.assertRaises(ValidationError):
            CompanySettingsUpdate(timezone="Mars/Olympus")
        with self.assertRaises(ValidationError):
            CompanySettingsUpdate(default_shift_start="9am")
        with self.assertRaises(ValidationError):
            CompanySettingsUpdate(locale="de-DE")


if __name__ == "__main__":
    unittest.main()
