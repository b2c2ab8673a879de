import unittest

from culturejobs.core.sanitize import filter_allowed, fix_up_markup, sanitize_html

REL = 'rel="noopener noreferrer nofollow"'


class SanitizeHtmlTests(unittest.TestCase):
    def test_script_removed_with_content(self):
        self.assertEqual(sanitize_html("<script>x</script><p>ok</p>"), "<p>ok</p>")

    def test_empty_href_is_delinked(self):
        self.assertEqual(sanitize_html('<a href="">link</a>'), "link")

    def test_link_attributes_are_cleaned_and_rel_forced(self):
        self.assertEqual(
            sanitize_html('<a href="https://x" class="y" onclick="z">t</a>'),
            f'<a href="https://x" {REL}>t</a>',
        )

    def test_empty_fragment_collapses(self):
        self.assertEqual(sanitize_html("<div><span></span></div>"), "")
        self.assertEqual(sanitize_html("<p> </p><br>"), "")
        self.assertEqual(sanitize_html(""), "")
        self.assertEqual(sanitize_html(None), "")

    def test_wrappers_removed_but_allowed_children_kept(self):
        self.assertEqual(
            sanitize_html('<div class="x"><p>Hello <span style="color:red">world</span></p></div>'),
            "<p>Hello world</p>",
        )

    def test_unsafe_schemes_are_delinked(self):
        self.assertEqual(sanitize_html('<a href="javascript:alert(1)">x</a>'), "x")
        self.assertEqual(sanitize_html('<a href="//evil.example/x">y</a>'), "y")

    def test_mailto_kept(self):
        self.assertEqual(
            sanitize_html('<a href="mailto:jobs@example.be" title="Mail">jobs</a>'),
            f'<a href="mailto:jobs@example.be" title="Mail" {REL}>jobs</a>',
        )

    def test_link_attributes_keep_source_order_with_rel_last(self):
        self.assertEqual(
            sanitize_html('<p><a title="Site" class="c" href="https://example.be">site</a></p>'),
            f'<p><a title="Site" href="https://example.be" {REL}>site</a></p>',
        )

    def test_lists_and_comments(self):
        self.assertEqual(
            sanitize_html('<ul><li onclick="x()">One</li><!-- note --><li>Two</li></ul>'),
            "<ul><li>One</li><li>Two</li></ul>",
        )


class SanitizerPassTests(unittest.TestCase):
    def test_filter_pass_keeps_only_allow_listed_attributes(self):
        self.assertEqual(filter_allowed('<p class="lead">t</p><img src="a.png">'), "<p>t</p>")

    def test_fix_up_pass_strips_presentation_attributes(self):
        self.assertEqual(fix_up_markup('<p style="c" onmouseover="x">t</p>'), "<p>t</p>")

    def test_fix_up_pass_delinks_anchor_without_href(self):
        self.assertEqual(fix_up_markup("<p><a>bare</a></p>"), "<p>bare</p>")


if __name__ == "__main__":
    unittest.main()
