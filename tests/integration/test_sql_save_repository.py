import sys
import tempfile
from pathlib import Path
import unittest

from sqlalchemy import text

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam.application.services import save_migrator
from jam.application.services.career_service import CareerService
from jam.infrastructure.db.sql.connection import create_session_factory
from jam.infrastructure.db.sql.save_repo import SAVE_TABLE, SqlSaveRepository


class _MidpointRng:
    def randint(self, a: int, b: int) -> int:
        return (a + b) // 2


class SqlSaveRepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.session_factory = create_session_factory(f"sqlite:///{Path(self._tmp.name) / 'jam.db'}")
        self.repo = SqlSaveRepository(self.session_factory)

    def tearDown(self) -> None:
        self.session_factory.kw["bind"].dispose()
        self._tmp.cleanup()

    def test_upsert_keeps_one_row_per_key(self) -> None:
        self.repo.put("slot", '{"version": 4, "week": 1}')
        self.repo.put("slot", '{"version": 5, "week": 2}')

        self.assertEqual('{"version": 5, "week": 2}', self.repo.get("slot"))
        with self.session_factory() as session:
            rows = session.execute(text(f"SELECT save_key, version FROM {SAVE_TABLE}")).all()
        self.assertEqual([("slot", 5)], [tuple(row) for row in rows])

    def test_missing_key_and_delete(self) -> None:
        self.assertIsNone(self.repo.get("absent"))
        self.assertFalse(self.repo.exists("absent"))
        self.repo.put("slot", "not json")
        self.assertTrue(self.repo.exists("slot"))
        self.repo.delete("slot")
        self.assertIsNone(self.repo.get("slot"))

    def test_schema_creation_is_idempotent(self) -> None:
        self.repo.ensure_table()
        SqlSaveRepository(self.session_factory)
        self.repo.put("slot", "{}")
        self.assertEqual("{}", self.repo.get("slot"))

    def test_career_service_saves_and_loads_through_sql(self) -> None:
        service = CareerService(self.repo, rng=_MidpointRng(), scoring_mode="legacy")
        service.new_season_intent("Mira")
        service.choose_concept_intent("Folk", "Nostalgia", "Harbour")
        for activity in ("write", "write", "practice", "perform", "perform", "write", "practice"):
            service.instruct_intent(activity)

        reloaded = CareerService(self.repo, rng=_MidpointRng(), scoring_mode="legacy")
        self.assertTrue(reloaded.load_intent().accepted)
        self.assertEqual(service.state, reloaded.state)
        with self.session_factory() as session:
            version = session.execute(
                text(f"SELECT version FROM {SAVE_TABLE} WHERE save_key = :key"),
                {"key": save_migrator.SAVE_KEY},
            ).scalar_one()
        self.assertEqual(save_migrator.SAVE_VERSION, version)


if __name__ == "__main__":
    unittest.main()
