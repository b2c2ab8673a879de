import unittest
from datetime import datetime, timezone

from bs4 import BeautifulSoup

from culturejobs.providers.culture_be.listing import (
    PAGE_PARAM,
    build_listing_url,
    parse_contract_types,
    parse_listing_page,
    parse_posting_type,
    parse_total_pages,
)
from html_fixtures import listing_html, listing_row


class PostingTypeTests(unittest.TestCase):
    def test_stage_variants(self):
        for raw in ("Stage", "STAGE", "Stagiaire", "stâge"):
            self.assertEqual(parse_posting_type(raw), "STAGE", raw)

    def test_priority_and_fallback(self):
        self.assertEqual(parse_posting_type("Bénévolat"), "BENEVOLAT")
        self.assertEqual(parse_posting_type("Emploi / stage"), "STAGE")
        self.assertEqual(parse_posting_type("Emploi"), "EMPLOI")
        self.assertEqual(parse_posting_type("Formation"), "AUTRE")
        self.assertEqual(parse_posting_type(""), "AUTRE")


class ContractTypeTests(unittest.TestCase):
    def test_comma_separated_tokens(self):
        self.assertEqual(parse_contract_types("CDD, CDI"), ["CDD", "CDI"])
        self.assertEqual(parse_contract_types("Autre, cdd, CDD"), ["AUTRE", "CDD"])

    def test_empty_or_unknown(self):
        self.assertEqual(parse_contract_types(None), [])
        self.assertEqual(parse_contract_types("Freelance"), [])


class ListingPageTests(unittest.TestCase):
    def test_rows_are_parsed(self):
        url = build_listing_url(1)
        html = listing_html(
            [
                listing_row(1234, contract="CDD, CDI"),
                listing_row(1235, title="Stagiaire régie", posting_type="Stage", contract="", css="data-row-2"),
            ],
            total_pages=3,
        )
        page = parse_listing_page(html, url)

        self.assertEqual(page.total_pages, 3)
        self.assertEqual([j.uid for j in page.jobs], [1234, 1235])
        first = page.jobs[0]
        self.assertEqual(first.source_url, "https://www.culture.be/vous-cherchez/emploi-stage/offre/?uid=1234")
        self.assertEqual(first.listing_url, url)
        self.assertEqual(first.title, "Chargé de projets")
        self.assertEqual(first.organization, "Théâtre National")
        self.assertEqual(first.publication_date, datetime(2026, 3, 5, tzinfo=timezone.utc))
        self.assertEqual(first.publication_date_raw, "05-03-2026")
        self.assertEqual(first.posting_type, "EMPLOI")
        self.assertEqual(first.contract_label, "CDD, CDI")
        self.assertEqual(first.contract_types, ["CDD", "CDI"])

        second = page.jobs[1]
        self.assertEqual(second.posting_type, "STAGE")
        self.assertIsNone(second.contract_label)
        self.assertEqual(second.contract_types, [])

    def test_rows_without_uid_or_valid_date_are_skipped(self):
        html = listing_html(
            [
                listing_row(None),
                listing_row(1, date="31-13-2026"),
                listing_row(2, date="hier"),
                listing_row(3),
            ]
        )
        page = parse_listing_page(html, build_listing_url(1))
        self.assertEqual([j.uid for j in page.jobs], [3])

    def test_other_rows_are_ignored(self):
        html = "<table><tr class='header'><td>Date</td></tr></table>"
        page = parse_listing_page(html, build_listing_url(1))
        self.assertEqual(page.jobs, [])
        self.assertEqual(page.total_pages, 1)


class TotalPagesTests(unittest.TestCase):
    def test_last_page_link_fallback(self):
        href = build_listing_url(7).replace("https://www.culture.be", "")
        soup = BeautifulSoup(f'<a id="cfwb_form_pagelink_last" href="{href}">»</a>', "html.parser")
        self.assertEqual(parse_total_pages(soup), 7)

    def test_defaults_to_one(self):
        soup = BeautifulSoup('<tr class="bottom-row"><td align="center">Page</td></tr>', "html.parser")
        self.assertEqual(parse_total_pages(soup), 1)

    def test_listing_url(self):
        self.assertEqual(build_listing_url(1), "https://www.culture.be/vous-cherchez/emploi-stage/")
        self.assertIn("page%5D=2", build_listing_url(2))
        self.assertTrue(PAGE_PARAM.endswith("[page]"))


if __name__ == "__main__":
    unittest.main()
