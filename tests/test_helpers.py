"""Tests for filerecord.helpers and filerecord.utilities.utils."""

import pytest

from filerecord.helpers import decode_id, encode_id, find_by_id, force_extension, record_url
from filerecord.utilities.utils import tableize, to_snake


class TestIdentifiers:
    def test_encode(self):
        assert encode_id("scripts/util/helper.rb") == "scripts/util/helper~rb"
        assert encode_id("archive.tar.gz") == "archive.tar~gz"

    def test_only_final_component(self):
        assert encode_id("v1.2/readme") == "v1.2/readme"

    def test_dotfile_unchanged(self):
        assert encode_id("config/.env") == "config/.env"

    def test_decode(self):
        assert decode_id("scripts/util/helper~rb") == "scripts/util/helper.rb"
        assert decode_id("projects/alpha") == "projects/alpha"

    def test_round_trip(self):
        for path in ("a/b.c", "x.tar.gz", "plain", "dir/sub/name.md"):
            assert decode_id(encode_id(path)) == path

    def test_literal_tilde_is_escaped(self):
        assert encode_id("a/b~c.rb") == "a/b%7Ec~rb"
        assert encode_id("dir/a~") == "dir/a%7E"
        assert decode_id("dir/a%7E") == "dir/a~"

    def test_tilde_next_to_extension_stays_distinct(self):
        assert encode_id("a~.b") != encode_id("a.~b")
        assert decode_id(encode_id("a~.b")) == "a~.b"
        assert decode_id(encode_id("a.~b")) == "a.~b"

    def test_round_trip_with_tildes_and_percents(self):
        for path in ("a/he~lper.rb", "dir/a~", "x~.tar.gz", "~/notes.md", "50%.txt", "a/%7E.md", ".e~v"):
            assert decode_id(encode_id(path)) == path

    def test_force_extension(self):
        assert force_extension("a/b.rb", "txt") == "a/b.txt"
        assert force_extension("a/b.rb") == "a/b"
        assert force_extension("a/b", "md") == "a/b.md"


class TestRecordUrl:
    def test_with_record(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        assert record_url("show", record) == "/scripts/show/scripts/util/helper~rb"
        assert record_url("show", record, format="json") == "/scripts/show/scripts/util/helper~rb.json"
        assert record_url("edit", record, controller="files", tab="raw") == (
            "/files/edit/scripts/util/helper~rb?tab=raw"
        )

    def test_without_record(self):
        assert record_url("index", None, controller="scripts") == "/scripts/index"
        with pytest.raises(ValueError):
            record_url("index", None)

    def test_with_identifier_string(self):
        assert record_url("show", "a/b~rb", controller="files") == "/files/show/a/b~rb"

    def test_escapes_survive_quoting(self, scripts, write):
        write("scripts/util/he~lper.rb")
        record = scripts.get("scripts/util/he~lper.rb")
        assert record_url("show", record) == "/scripts/show/scripts/util/he%257Elper~rb"


class TestFindById:
    def test_lookup(self, scripts, write):
        write("scripts/util/helper.rb", b"x")
        assert find_by_id(scripts, "scripts/util/helper~rb").body == b"x"
        assert find_by_id(scripts, "helper").path == "scripts/util/helper.rb"

    def test_lookup_with_tilde_in_name(self, scripts, write):
        write("scripts/util/he~lper.rb", b"t")
        assert find_by_id(scripts, encode_id("scripts/util/he~lper.rb")).body == b"t"


class TestNaming:
    def test_to_snake(self):
        assert to_snake("RubyScript") == "ruby_script"
        assert to_snake("HTMLPage") == "html_page"
        assert to_snake("scripts") == "scripts"

    def test_tableize(self):
        assert tableize("Widget") == "widgets"
        assert tableize("RubyScript") == "ruby_scripts"
        assert tableize("Notes") == "notes"

    def test_tableize_irregular_endings(self):
        assert tableize("Category") == "categories"
        assert tableize("Box") == "boxes"
        assert tableize("Match") == "matches"
        assert tableize("Bush") == "bushes"
        assert tableize("Class") == "classes"
        assert tableize("Day") == "days"
