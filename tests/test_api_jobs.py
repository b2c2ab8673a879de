import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from db_fixtures import job_row, memory_sessionmaker
from html_fixtures import board, detail_html, listing_row

from fastapi.testclient import TestClient

from culturejobs.api.deps import culture_be_provider, db_session, response_cache
from culturejobs.api.main import JOBS_CACHE_KEY, app
from culturejobs.cache import ResponseCache
from culturejobs.db import crud
from culturejobs.errors import PersistenceError
from culturejobs.providers.culture_be import CultureBeProvider
from culturejobs.providers.culture_be.listing import build_listing_url


class JobsApiTests(unittest.TestCase):
    def setUp(self):
        self.SessionLocal = memory_sessionmaker()
        self.cache = ResponseCache(None)
        self.cache.connect()
        self.fetcher = board([[listing_row(21), listing_row(22)]], details={
            21: detail_html(), 22: detail_html(),
        })

        with self.SessionLocal() as session:
            soon = datetime.now(timezone.utc) + timedelta(days=2)
            crud.insert_jobs(
                session,
                [
                    job_row(10, publication_date=datetime(2026, 3, 1, tzinfo=timezone.utc), publication_date_raw="01-03-2026"),
                    job_row(12, posting_type="STAGE", contract_types=["CDD", "CDI"]),
                ],
            )
            crud.insert_jobs(session, [job_row(11, posting_type="BENEVOLAT", application_deadline=soon)])

        def override_db_session():
            with self.SessionLocal() as session:
                yield session

        app.dependency_overrides[db_session] = override_db_session
        app.dependency_overrides[response_cache] = lambda: self.cache
        app.dependency_overrides[culture_be_provider] = lambda: CultureBeProvider(fetcher=self.fetcher)
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_list_jobs_newest_first(self):
        res = self.client.get("/jobs")
        self.assertEqual(res.status_code, 200)
        body = res.json()

        self.assertEqual(body["source"], "culture.be")
        self.assertIn("fetched_at", body)
        self.assertIsNone(body["last_synced_at"])
        self.assertEqual([j["uid"] for j in body["data"]], [12, 11, 10])

        stage, volunteer, oldest = body["data"]
        self.assertEqual(stage["id"], "12")
        self.assertEqual(stage["type"], "stage")
        self.assertEqual(stage["job_type"], "STAGE")
        self.assertEqual(stage["contract_types"], ["CDD", "CDI"])
        self.assertEqual(stage["deadline_status"], "unknown")
        self.assertIsNone(stage["days_left"])
        self.assertEqual(volunteer["type"], "bénévolat")
        self.assertEqual(volunteer["deadline_status"], "urgent")
        self.assertEqual(oldest["date"], "01-03-2026")
        self.assertEqual(oldest["employer"], "Théâtre National")

    def test_invalid_rows_are_left_out(self):
        with self.SessionLocal() as session:
            crud.insert_jobs(session, [job_row(13, source_url="offre/13"), job_row(14, title="")])

        res = self.client.get("/jobs")

        self.assertEqual(res.status_code, 200)
        self.assertEqual([j["uid"] for j in res.json()["data"]], [12, 11, 10])

    def test_list_is_cached_until_sync(self):
        self.assertEqual(len(self.client.get("/jobs").json()["data"]), 3)
        with self.SessionLocal() as session:
            crud.insert_jobs(session, [job_row(15)])

        self.assertEqual(len(self.client.get("/jobs").json()["data"]), 3)
        self.assertIsNotNone(self.cache.get(JOBS_CACHE_KEY))

        self.client.post("/jobs/sync")
        self.assertIsNone(self.cache.get(JOBS_CACHE_KEY))
        uids = [j["uid"] for j in self.client.get("/jobs").json()["data"]]
        # the sync saw only 21 and 22 upstream, so everything else was removed
        self.assertEqual(sorted(uids), [21, 22])

    def test_store_failure_is_500(self):
        with mock.patch("culturejobs.api.main.crud.list_jobs", side_effect=PersistenceError("down")):
            res = self.client.get("/jobs")
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json()["detail"], "Failed to fetch job offers")

    def test_sync_summary(self):
        res = self.client.post("/jobs/sync")
        self.assertEqual(res.status_code, 200)
        body = res.json()

        self.assertEqual(body["source"], "culture.be")
        self.assertEqual(body["scanned"], 2)
        self.assertEqual(body["new_found"], 2)
        self.assertEqual(body["inserted"], 2)
        self.assertEqual(body["removed"], 3)
        self.assertEqual(body["removed_uids"], [10, 11, 12])
        self.assertEqual(body["failed_uids"], [])

        last = self.client.get("/jobs").json()["last_synced_at"]
        self.assertIsNotNone(last)

    def test_sync_upstream_failure_is_502(self):
        self.fetcher.failing.add(build_listing_url(1))

        res = self.client.post("/jobs/sync")

        self.assertEqual(res.status_code, 502)
        self.assertEqual(res.json()["detail"], "Failed to sync job offers")
        with self.SessionLocal() as session:
            self.assertEqual(crud.persisted_uids(session), {10, 11, 12})

    def test_get_job(self):
        res = self.client.get("/jobs/11")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["uid"], 11)
        self.assertEqual(res.json()["link"], "https://www.culture.be/vous-cherchez/emploi-stage/offre/?uid=11")

    def test_get_job_not_found(self):
        res = self.client.get("/jobs/999")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()["detail"], "Job not found")

    def test_get_job_rejects_bad_ids(self):
        self.assertEqual(self.client.get("/jobs/0").status_code, 422)
        self.assertEqual(self.client.get("/jobs/abc").status_code, 422)

    def test_get_invalid_job_is_500(self):
        with self.SessionLocal() as session:
            crud.insert_jobs(session, [job_row(30, title="")])
        res = self.client.get("/jobs/30")
        self.assertEqual(res.status_code, 500)


if __name__ == "__main__":
    unittest.main()
