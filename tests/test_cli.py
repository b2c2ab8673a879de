import io
import json
import unittest
from contextlib import contextmanager, redirect_stdout
from unittest import mock

from db_fixtures import job_row, memory_sessionmaker
from html_fixtures import board, detail_html, listing_row

from culturejobs import cli
from culturejobs.db import crud
from culturejobs.errors import PersistenceError
from culturejobs.providers.culture_be import CultureBeProvider


class CliTests(unittest.TestCase):
    def setUp(self):
        self.Session = memory_sessionmaker()

        @contextmanager
        def fake_session():
            with self.Session() as session:
                yield session

        patcher = mock.patch("culturejobs.cli.get_session", fake_session)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = cli.main(list(argv))
        return code, out.getvalue()

    def test_list_and_show(self):
        with self.Session() as session:
            crud.insert_jobs(session, [job_row(1), job_row(2)])

        code, out = self._run("list", "--limit", "1")
        self.assertEqual(code, 0)
        self.assertIn("Offre 2", out)
        self.assertNotIn("Offre 1", out)
        self.assertIn("2 job(s)", out)

        code, out = self._run("show", "1")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["title"], "Offre 1")

    def test_show_missing(self):
        code, _ = self._run("show", "404")
        self.assertEqual(code, 1)

    def test_sync_prints_summary_and_stamps_state(self):
        provider = CultureBeProvider(fetcher=board([[listing_row(5)]], details={5: detail_html()}))
        with mock.patch("culturejobs.cli.providers.get", return_value=provider):
            code, out = self._run("sync", "--concurrency", "2")

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["inserted"], 1)

        code, out = self._run("last-sync")
        self.assertNotEqual(out.strip(), "never")

    def test_serve_runs_uvicorn(self):
        with mock.patch("uvicorn.run") as run:
            code, _ = self._run("serve", "--port", "9001")

        self.assertEqual(code, 0)
        self.assertEqual(run.call_args[0][0], "culturejobs.api.main:app")
        self.assertEqual(run.call_args.kwargs["port"], 9001)

    def test_store_errors_exit_2(self):
        with mock.patch("culturejobs.cli.crud.list_jobs", side_effect=PersistenceError("down")):
            code, _ = self._run("list")
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()
