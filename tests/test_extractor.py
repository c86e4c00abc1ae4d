import pytest
from bs4 import BeautifulSoup

from crawler.extractor import AssetExtractor, is_absolute_static, is_followable

PAGE = """
<html>
<head>
  <link rel="stylesheet" href="css/main.css?v=1">
  <link rel="icon" href="favicon.ico">
  <link rel="stylesheet" href="css/main.css?v=1">
  <link rel="preconnect">
  <script src="js/app.js"></script>
  <script>var inline = true;</script>
  <script src="http://cdn.test/lib.js"></script>
</head>
<body>
  <img src="img/a.png"><img alt="no source"><img src="img/b.png">
  <a href="#">top</a>
  <a href="about.html">about</a>
  <a href="index.html">home</a>
  <a>empty</a>
</body>
</html>
"""


def test_extract_from_html_keeps_order_and_duplicates():
    assets = AssetExtractor().extract_from_html(BeautifulSoup(PAGE, "html.parser"))

    assert assets.css == ["css/main.css?v=1", "favicon.ico", "css/main.css?v=1"]
    assert assets.js == ["js/app.js", "http://cdn.test/lib.js"]
    assert assets.img == ["img/a.png", "img/b.png"]
    assert assets.page_links == ["#", "about.html", "index.html"]


def test_extract_from_html_skips_empty_attributes():
    soup = BeautifulSoup('<img src=""><script src=" "></script><a href="">x</a>', "html.parser")
    assets = AssetExtractor().extract_from_html(soup)

    assert assets.img == []
    assert assets.js == []
    assert assets.page_links == []


@pytest.mark.parametrize("href, expected", [
    ("about.html", True),
    ("blog/post.html#comments", True),
    ("page.html?id=3", True),
    ("#", False),
    ("index.html", False),
    ("contact.php", False),
    ("mailto:me@site.test", False),
    ("docs/", False),
])
def test_is_followable(href, expected):
    assert is_followable(href) is expected


def test_is_absolute_static():
    assert is_absolute_static("http://cdn.test/lib.js")
    assert not is_absolute_static("js/app.js")
    assert not is_absolute_static("/js/app.js")


CSS = """
.logo { background: url('img/logo.png?v=2'); }
@font-face { src: url("fonts/icons.woff#iefix") format("woff"); }
.remote { background: url(http://cdn.test/bg.png); }
.secure { background: url(https://cdn.test/bg.png); }
.gradient { fill: url(#grad); }
.plain { background: url( sprites/all.gif ); }
"""


def test_extract_from_css_at_site_root():
    images = AssetExtractor().extract_from_css("style.css", CSS)

    assert images == ["img/logo.png", "fonts/icons.woff", "sprites/all.gif"]


def test_extract_from_css_relative_to_stylesheet_directory():
    images = AssetExtractor().extract_from_css("css/theme/style.css", "a { background: url(../img/x.png); }")

    assert images == ["css/img/x.png"]


def test_extract_from_css_ignores_text_without_references():
    assert AssetExtractor().extract_from_css("style.css", "body { color: red; }") == []
