import unittest

from culturejobs.core.normalize import (
    normalize_key,
    normalize_multiline_text,
    normalize_text,
    parse_positive_int,
    strip_html_to_text,
)


class NormalizeTextTests(unittest.TestCase):
    def test_collapses_whitespace_and_nbsp(self):
        self.assertEqual(normalize_text("  Chargé de \n\t projets  "), "Chargé de projets")

    def test_none_is_empty(self):
        self.assertEqual(normalize_text(None), "")
        self.assertEqual(normalize_multiline_text(None), "")
        self.assertEqual(normalize_key(None), "")

    def test_multiline_keeps_lines_and_drops_blank_ones(self):
        raw = "  Rue de la Loi  1 \r\n\n   \n1000  Bruxelles  "
        self.assertEqual(normalize_multiline_text(raw), "Rue de la Loi 1\n1000 Bruxelles")


class NormalizeKeyTests(unittest.TestCase):
    def test_strips_accents_and_case(self):
        self.assertEqual(normalize_key("Bénévolat"), "benevolat")
        self.assertEqual(normalize_key("RÉGIME"), "regime")

    def test_non_alphanumeric_runs_become_one_space(self):
        self.assertEqual(normalize_key("Secteur(s) d'activité(s) :"), "secteur s d activite s")


class HelperTests(unittest.TestCase):
    def test_strip_html_to_text(self):
        self.assertEqual(strip_html_to_text("<p>Hello <strong>world</strong></p>"), "Hello world")
        self.assertEqual(strip_html_to_text(""), "")

    def test_parse_positive_int(self):
        self.assertEqual(parse_positive_int("42"), 42)
        self.assertEqual(parse_positive_int("12abc"), 12)
        self.assertIsNone(parse_positive_int("0"))
        self.assertIsNone(parse_positive_int("-3"))
        self.assertIsNone(parse_positive_int("abc"))
        self.assertIsNone(parse_positive_int(None))


if __name__ == "__main__":
    unittest.main()
