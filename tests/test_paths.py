import os

import pytest

from crawler.models import AssetKind, Reference
from crawler.paths import ExistenceGuard, PathResolver, join_relative, strip_suffix
from utils.error_handler import MalformedReference

BASE_URL = "http://site.test/theme/"


def ref(value, kind=AssetKind.JS):
    return Reference(BASE_URL + "index.html", kind, value)


@pytest.mark.parametrize("value, expected", [
    ("style.css?v=1", "style.css"),
    ("img/logo.png#top", "img/logo.png"),
    ("a.js?x=1#frag", "a.js"),
    ("a.js#frag?x=1", "a.js"),
    ("plain.js", "plain.js"),
    ("?only", ""),
])
def test_strip_suffix_cuts_at_first_marker(value, expected):
    assert strip_suffix(value) == expected


def test_resolve_joins_onto_save_folder(tmp_path):
    resolver = PathResolver(BASE_URL, str(tmp_path))
    target = resolver.resolve(ref("js/vendor/app.js?ver=3"))

    assert target.remote_url == BASE_URL + "js/vendor/app.js"
    assert target.local_path == os.path.join(str(tmp_path), "js", "vendor", "app.js")
    assert target.site_path == "js/vendor/app.js"


def test_resolve_adds_missing_trailing_slash_and_drops_leading_slash(tmp_path):
    resolver = PathResolver("http://site.test/theme", str(tmp_path))
    target = resolver.resolve(ref("/css/main.css"))

    assert target.remote_url == "http://site.test/theme/css/main.css"
    assert target.local_path == os.path.join(str(tmp_path), "css", "main.css")


def test_same_cleaned_reference_resolves_to_same_path(tmp_path):
    resolver = PathResolver(BASE_URL, str(tmp_path))
    first = resolver.resolve(ref("app.js?v=1"))
    second = resolver.resolve(ref("app.js#main", kind=AssetKind.CSS))

    assert first.local_path == second.local_path
    assert first.remote_url == second.remote_url


@pytest.mark.parametrize("value", ["", "   ", "?v=1", "#top", "../outside.js", "assets/",
                                   "img/../../escaped.png", "img/../../../etc/passwd", "./", "img/.."])
def test_resolve_rejects_malformed_references(tmp_path, value):
    resolver = PathResolver(BASE_URL, str(tmp_path))
    with pytest.raises(MalformedReference):
        resolver.resolve(ref(value))


def test_resolve_collapses_parent_segments_inside_the_site(tmp_path):
    resolver = PathResolver(BASE_URL, str(tmp_path))
    target = resolver.resolve(ref("img/../js/./app.js"))

    assert target.site_path == "js/app.js"
    assert target.remote_url == BASE_URL + "js/app.js"
    assert target.local_path == os.path.join(str(tmp_path), "js", "app.js")


@pytest.mark.parametrize("css_path, value, expected", [
    ("style.css", "img/logo.png", "img/logo.png"),
    ("css/style.css", "img/bg.png", "css/img/bg.png"),
    ("css/style.css", "../img/bg.png", "img/bg.png"),
    ("css/style.css?v=2", "./a.gif", "css/a.gif"),
    ("style.css", "../up.png", "../up.png"),
    ("css/style.css", "/img/a.png", "css/img/a.png"),
    ("css/deep/style.css", "//img/a.png", "css/deep/img/a.png"),
])
def test_join_relative_uses_stylesheet_directory(css_path, value, expected):
    assert join_relative(css_path, value) == expected


def test_existence_guard(tmp_path):
    guard = ExistenceGuard()
    existing = tmp_path / "shared.js"
    existing.write_bytes(b"x")

    assert guard.should_skip(str(existing)) is True
    assert guard.should_skip(str(tmp_path / "missing.js")) is False
    assert guard.should_skip(str(tmp_path)) is False
