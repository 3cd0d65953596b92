import io
import os
import sys
import tempfile
from pathlib import Path
import unittest
from unittest import mock

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from jam import bootstrap
from jam.application.services.career_journal import CareerJournal
from jam.domain.repositories import SaveStoreError
from jam.infrastructure.db.sql.save_repo import SqlSaveRepository
from jam.infrastructure.file_save_repo import FileSaveRepository
from jam.infrastructure.inmemory.inmemory_save_repo import InMemorySaveRepository


class BootstrapSettingsTests(unittest.TestCase):
    def test_defaults_when_environment_is_empty(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = bootstrap.load_settings()
        self.assertIsNone(settings.database_url)
        self.assertEqual("dice", settings.scoring_mode)
        self.assertIsNone(settings.seed)
        self.assertEqual(2.5, settings.perform_delay_s)
        self.assertEqual("performer-jam-save-v3", settings.save_key)

    def test_environment_overrides(self) -> None:
        env = {
            "JAM_SCORING_MODE": "Legacy",
            "JAM_SEED": "42",
            "JAM_PERFORM_DELAY_S": "0",
            "JAM_PERFORMER_NAME": "Mira",
            "JAM_SAVE_KEY": "slot-2",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = bootstrap.load_settings()
        self.assertEqual("legacy", settings.scoring_mode)
        self.assertEqual(42, settings.seed)
        self.assertEqual(0.0, settings.perform_delay_s)
        self.assertEqual("Mira", settings.performer_name)
        self.assertEqual("slot-2", settings.save_key)

    def test_invalid_values_fall_back(self) -> None:
        env = {"JAM_SCORING_MODE": "vibes", "JAM_SEED": "abc", "JAM_PERFORM_DELAY_S": "-3"}
        with mock.patch.dict(os.environ, env, clear=True):
            settings = bootstrap.load_settings()
        self.assertEqual("dice", settings.scoring_mode)
        self.assertIsNone(settings.seed)
        self.assertEqual(2.5, settings.perform_delay_s)


class BootstrapWiringTests(unittest.TestCase):
    def test_file_store_is_the_default(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            repo = bootstrap.create_save_repo(bootstrap.Settings(save_dir=tmp))
        self.assertIsInstance(repo, FileSaveRepository)

    def test_sqlite_url_builds_sql_store(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            url = f"sqlite:///{Path(tmp) / 'jam.db'}"
            repo = bootstrap.create_save_repo(bootstrap.Settings(database_url=url, save_dir=tmp))
            self.assertIsInstance(repo, SqlSaveRepository)
            repo._session_factory.kw["bind"].dispose()

    def test_sql_failure_falls_back_to_files(self) -> None:
        output = io.StringIO()
        with tempfile.TemporaryDirectory() as tmp, mock.patch.object(
            bootstrap, "_build_sql_save_repo", side_effect=SaveStoreError("Could not prepare the save table")
        ), mock.patch("sys.stdout", output):
            repo = bootstrap.create_save_repo(bootstrap.Settings(database_url="postgresql://db/jam", save_dir=tmp))
        self.assertIsInstance(repo, FileSaveRepository)
        self.assertIn("saving to files instead", output.getvalue())

    def test_unreachable_local_mysql_skips_sql(self) -> None:
        output = io.StringIO()
        with tempfile.TemporaryDirectory() as tmp, mock.patch.object(
            bootstrap, "_looks_like_local_mysql_unreachable", return_value=True
        ), mock.patch.object(bootstrap, "_build_sql_save_repo") as build_mock, mock.patch("sys.stdout", output):
            repo = bootstrap.create_save_repo(
                bootstrap.Settings(database_url="mysql+mysqlconnector://root@127.0.0.1:3307/jam", save_dir=tmp)
            )
        self.assertIsInstance(repo, FileSaveRepository)
        build_mock.assert_not_called()

    def test_non_mysql_urls_are_not_probed(self) -> None:
        self.assertFalse(bootstrap._looks_like_local_mysql_unreachable("sqlite:///jam.db"))
        self.assertFalse(bootstrap._looks_like_local_mysql_unreachable("mysql+mysqlconnector://root@db.example.com/jam"))

    def test_career_service_gets_journal_and_settings(self) -> None:
        service = bootstrap.create_career_service(
            bootstrap.Settings(scoring_mode="legacy", seed=3, perform_delay_s=0.0, performer_name="Mira"),
            save_repo=InMemorySaveRepository(),
        )
        self.assertIsInstance(service.journal, CareerJournal)
        self.assertEqual("legacy", service.scoring_mode)
        self.assertEqual("Mira", service.state.performer_name)
        self.assertEqual(0.0, service.perform_delay_s)

    def test_seeded_services_pick_the_same_calendar(self) -> None:
        settings = bootstrap.Settings(seed=3, perform_delay_s=0.0)
        first = bootstrap.create_career_service(settings, save_repo=InMemorySaveRepository())
        second = bootstrap.create_career_service(settings, save_repo=InMemorySaveRepository())
        first.new_season_intent("A")
        second.new_season_intent("B")
        self.assertEqual(first.state.calendar_seed, second.state.calendar_seed)
        self.assertEqual(first.schedule, second.schedule)


if __name__ == "__main__":
    unittest.main()
