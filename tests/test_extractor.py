from __future__ import annotations

import unittest

from pipeline.errors import ParseError
from pipeline.extractor import extract_page
from schemas.page_record import MAX_COLORS, MAX_CTAS, MAX_HEADINGS, MAX_IMAGES

URL = "https://acme.test/"

SAMPLE_HTML = """
<html>
<head>
  <title>  Acme Widgets  </title>
  <meta name="Description" content=" Widgets for busy teams ">
  <meta name="keywords" content="widgets, teams">
  <style>body { color: #abcdef; }</style>
</head>
<body>
  <header><a href="/login">Log in</a></header>
  <nav>
    <a href="/pricing">Pricing</a>
    <a href="#top">Top</a>
  </nav>
  <h1>Ship   widgets faster</h1>
  <h2>Built for teams</h2>
  <h4>Not a tracked heading</h4>
  <p>Acme makes widgets.</p>
  <button>Get Started</button>
  <a href="/demo">Book a demo</a>
  <a href="/signup" class="btn">Sign up</a>
  <a href="/blog"></a>
  <div style="background: #FF0000; border-color: #0f0"></div>
  <img src="/hero.png" alt="Hero shot">
  <img src="/logo.svg">
  <script>var secret = "not content";</script>
  <footer>Copyright Acme</footer>
</body>
</html>
"""


class ExtractPageTests(unittest.TestCase):
    def setUp(self):
        self.record = extract_page(SAMPLE_HTML, URL)

    def test_head_fields(self):
        self.assertEqual(self.record.url, URL)
        self.assertEqual(self.record.title, "Acme Widgets")
        self.assertEqual(self.record.meta_description, "Widgets for busy teams")
        self.assertEqual(self.record.meta_keywords, "widgets, teams")

    def test_headings_are_h1_to_h3_only(self):
        self.assertEqual(self.record.headings, ["Ship widgets faster", "Built for teams"])

    def test_ctas_from_buttons_and_keyword_links(self):
        self.assertIn("Get Started", self.record.ctas)
        self.assertIn("Sign up", self.record.ctas)
        self.assertIn("Book a demo", self.record.ctas)
        # "Sign up" matches both the button selector and the keyword pattern
        self.assertEqual(self.record.ctas.count("Sign up"), 1)

    def test_links_skip_fragments_and_empty_text(self):
        hrefs = [link.href for link in self.record.links]
        self.assertIn("/pricing", hrefs)
        self.assertIn("/login", hrefs)
        self.assertNotIn("#top", hrefs)
        self.assertNotIn("/blog", hrefs)

    def test_nav_links_only_inside_nav(self):
        self.assertEqual([(l.href, l.text) for l in self.record.nav_links], [("/pricing", "Pricing")])

    def test_images_keep_alt_defaulting_to_empty(self):
        self.assertEqual(
            [(i.src, i.alt) for i in self.record.images],
            [("/hero.png", "Hero shot"), ("/logo.svg", "")],
        )

    def test_colors_come_from_inline_styles_only(self):
        self.assertEqual(self.record.colors, ["#FF0000", "#0f0"])

    def test_main_content_excludes_chrome_and_scripts(self):
        content = self.record.main_content
        self.assertIn("Acme makes widgets.", content)
        self.assertNotIn("Copyright Acme", content)
        self.assertNotIn("Log in", content)
        self.assertNotIn("Pricing", content)
        self.assertNotIn("not content", content)
        self.assertNotIn("  ", content)

    def test_deterministic(self):
        self.assertEqual(extract_page(SAMPLE_HTML, URL), self.record)


class ExtractPageLimitsTests(unittest.TestCase):
    def test_caps_are_respected(self):
        parts = []
        for i in range(30):
            parts.append(f"<h2>Heading {i}</h2>")
            parts.append(f"<button>Button {i}</button>")
            parts.append(f"<img src='/img{i}.png'>")
            parts.append(f"<span style='color: #{i:06x}'>x</span>")
        record = extract_page("<html><body>" + "".join(parts) + "</body></html>", URL)

        self.assertEqual(len(record.headings), MAX_HEADINGS)
        self.assertEqual(record.headings[0], "Heading 0")
        self.assertEqual(len(record.ctas), MAX_CTAS)
        self.assertEqual(len(record.images), MAX_IMAGES)
        self.assertEqual(len(record.colors), MAX_COLORS)

    def test_duplicate_colors_collapse(self):
        html = (
            "<div style='color:#112233'></div>"
            "<div style='background:#112233; color:#445566'></div>"
        )
        self.assertEqual(extract_page(html, URL).colors, ["#112233", "#445566"])

    def test_missing_head_fields_are_none(self):
        record = extract_page("<p>Just text</p>", URL)
        self.assertIsNone(record.title)
        self.assertIsNone(record.meta_description)
        self.assertIsNone(record.meta_keywords)
        self.assertEqual(record.main_content, "Just text")

    def test_empty_title_is_none(self):
        self.assertIsNone(extract_page("<title>   </title>", URL).title)

    def test_non_string_input_is_parse_error(self):
        with self.assertRaises(ParseError):
            extract_page(None, URL)


if __name__ == "__main__":
    unittest.main()
