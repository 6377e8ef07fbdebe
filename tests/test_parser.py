"""Tests for thicket.resources.parser: section splitting and type detection."""

import mimetypes

import pytest

from simplates import JSON_RESOURCE, NEGOTIATED, RENDERED_TXT, STATIC_TXT
from thicket.config import ParseDefaults
from thicket.errors import MalformedResourceError, PathError, SpecError
from thicket.resources.parser import guess_content_type, parse_resource
from thicket.resources.types import ResourceType


class TestPaths:
    def test_knows_its_relative_path(self) -> None:
        resource = parse_resource("/tmp", "/tmp/hasty-decisions.txt", "herpherpderpherp")
        assert resource.relative_path == "hasty-decisions.txt"

    def test_nested_path_is_posix_and_cleaned(self) -> None:
        resource = parse_resource("/srv/www", "/srv/www/a//b/./c.txt", "x")
        assert resource.relative_path == "a/b/c.txt"

    def test_keeps_site_root_and_source_path(self) -> None:
        resource = parse_resource("/srv/www", "/srv/www/a.txt", "x")
        assert str(resource.site_root) == "/srv/www"
        assert str(resource.source_path) == "/srv/www/a.txt"

    def test_path_outside_root_is_rejected(self) -> None:
        with pytest.raises(PathError, match="not under site root"):
            parse_resource("/srv/www", "/etc/passwd", "root:x:0:0")

    def test_root_itself_is_rejected(self) -> None:
        with pytest.raises(PathError):
            parse_resource("/srv/www", "/srv/www", "")


class TestContentType:
    def test_inferred_from_extension(self) -> None:
        resource = parse_resource("/tmp", "/tmp/hasty-decisions.js", "function herp() {}")
        assert resource.content_type == mimetypes.guess_type("x.js")[0]

    def test_unknown_extension_is_empty(self) -> None:
        resource = parse_resource("/tmp", "/tmp/notes.zzqx", "hello")
        assert resource.content_type == ""

    def test_no_extension_is_empty(self) -> None:
        assert guess_content_type("hams/bone/derp") == ""

    def test_defaults_override_mimetypes(self) -> None:
        defaults = ParseDefaults(content_types={".spt": "text/html"})
        assert guess_content_type("index.spt", defaults) == "text/html"
        assert guess_content_type("index.spt") == ""


class TestStatic:
    def test_zero_breaks_is_static(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic-static.txt", STATIC_TXT)
        assert resource.resource_type is ResourceType.STATIC

    def test_static_has_no_pages(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic-static.txt", STATIC_TXT)
        assert resource.init_page is None
        assert resource.logic_page is None
        assert resource.template_pages == ()

    def test_body_is_preserved_exactly(self) -> None:
        resource = parse_resource("/tmp", "/tmp/flurb.txt", "Everybody Dance Now!\n")
        assert resource.body == "Everybody Dance Now!\n"

    def test_empty_file_is_static(self) -> None:
        resource = parse_resource("/tmp", "/tmp/empty.txt", "")
        assert resource.resource_type is ResourceType.STATIC
        assert resource.body == ""

    def test_binary_bytes_are_static(self) -> None:
        payload = b"\x89PNG\r\n\x1a\n\x0c\xff\xfe"
        resource = parse_resource("/tmp", "/tmp/logo.png", payload)
        assert resource.resource_type is ResourceType.STATIC
        assert resource.body == payload

    def test_utf8_bytes_are_decoded(self) -> None:
        resource = parse_resource("/tmp", "/tmp/page.txt", RENDERED_TXT.encode())
        assert resource.resource_type is ResourceType.RENDERED


class TestJSON:
    def test_detected_from_content_type(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic.json", JSON_RESOURCE)
        assert resource.resource_type is ResourceType.JSON

    def test_has_init_and_logic_pages(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic.json", JSON_RESOURCE)
        assert resource.init_page is not None
        assert "class JDance" in resource.init_page.body
        assert resource.logic_page is not None
        assert "response.set_body" in resource.logic_page.body

    def test_has_no_template_pages(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic.json", JSON_RESOURCE)
        assert resource.template_pages == ()

    def test_third_section_is_ignored(self) -> None:
        content = "import json\fctx['a'] = 1\f\n{{ a }}\n"
        resource = parse_resource("/tmp", "/tmp/two-breaks.json", content)
        assert resource.resource_type is ResourceType.JSON
        assert resource.template_pages == ()


class TestRendered:
    def test_detected(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic-rendered.txt", RENDERED_TXT)
        assert resource.resource_type is ResourceType.RENDERED

    def test_has_init_logic_and_one_template(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic-rendered.txt", RENDERED_TXT)
        assert resource.init_page is not None
        assert resource.logic_page is not None
        assert len(resource.template_pages) == 1

    def test_template_body_excludes_specline(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic-rendered.txt", RENDERED_TXT)
        page = resource.template_pages[0]
        assert page.body == "{{ D.who }} Dance {{ D.when }}!\n"

    def test_template_inherits_content_type_and_default_renderer(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic-rendered.txt", RENDERED_TXT)
        spec = resource.template_pages[0].spec
        assert spec.content_type == "text/plain"
        assert spec.renderer == "kida"

    def test_specline_names_renderer(self) -> None:
        content = "\f\f #!raw\nhello\n"
        resource = parse_resource("/tmp", "/tmp/hello.html", content)
        assert resource.template_pages[0].spec.renderer == "raw"

    def test_default_renderer_comes_from_defaults(self) -> None:
        defaults = ParseDefaults(default_renderer="raw")
        resource = parse_resource("/tmp", "/tmp/basic.txt", RENDERED_TXT, defaults)
        assert resource.template_pages[0].spec.renderer == "raw"

    def test_one_break_without_template_is_malformed(self) -> None:
        with pytest.raises(MalformedResourceError, match="no template page"):
            parse_resource("/tmp", "/tmp/half.txt", "import os\fctx['a'] = 1\n")

    def test_template_without_body_is_malformed(self) -> None:
        with pytest.raises(MalformedResourceError, match="no body after its specline"):
            parse_resource("/tmp", "/tmp/nobody.txt", "import os\fpass\f#!kida")

    def test_pages_point_back_to_resource(self) -> None:
        resource = parse_resource("/tmp", "/tmp/basic-rendered.txt", RENDERED_TXT)
        for page in resource.pages:
            assert page.parent is resource


class TestNegotiated:
    def test_detected(self) -> None:
        resource = parse_resource("/tmp", "/tmp/hork", NEGOTIATED)
        assert resource.resource_type is ResourceType.NEGOTIATED

    def test_has_init_and_logic_pages(self) -> None:
        resource = parse_resource("/tmp", "/tmp/hork", NEGOTIATED)
        assert resource.init_page is not None
        assert resource.logic_page is not None

    def test_template_pages_keep_declaration_order(self) -> None:
        resource = parse_resource("/tmp", "/tmp/hork", NEGOTIATED)
        media_types = [page.spec.content_type for page in resource.template_pages]
        assert media_types == ["text/plain", "application/json"]

    def test_duplicate_media_type_is_rejected(self) -> None:
        content = "\f\f text/plain\na\n\f text/plain #!raw\nb\n"
        with pytest.raises(SpecError, match="text/plain"):
            parse_resource("/tmp", "/tmp/dup", content)

    def test_bad_specline_names_path(self) -> None:
        content = "\f\f text/plain #!kida extra\nbody\n\f text/html\nbody\n"
        with pytest.raises(SpecError) as excinfo:
            parse_resource("/tmp", "/tmp/bad-spec", content)
        assert excinfo.value.path == "bad-spec"
        assert excinfo.value.specline == "text/plain #!kida extra"


@pytest.mark.parametrize(
    ("breaks", "expected"),
    [
        (0, ResourceType.STATIC),
        (2, ResourceType.RENDERED),
        (3, ResourceType.NEGOTIATED),
        (5, ResourceType.NEGOTIATED),
    ],
)
def test_break_count_decides_type(breaks: int, expected: ResourceType) -> None:
    sections = ["import os", "pass"] + [f" text/x-{i}\nbody {i}\n" for i in range(breaks - 1)]
    content = "\f".join(sections[: breaks + 1]) if breaks else "just text"
    resource = parse_resource("/tmp", "/tmp/page.txt", content)
    assert resource.resource_type is expected
    if expected is ResourceType.NEGOTIATED:
        assert len(resource.template_pages) == breaks - 1
