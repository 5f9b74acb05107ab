"""Unit tests for filerecord.core.record — accessors, path/attribute coupling, identity."""

import pytest

from filerecord.core.record import Record
from filerecord.engine.errors import LocationSpecError, PathMismatchError


class TestAccessors:
    def test_property_per_attribute(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        assert record.name == "helper"
        assert record["name"] == "helper"
        assert "name" in record
        assert isinstance(type(record).__dict__["name"], property)

    def test_unknown_attribute(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        with pytest.raises(KeyError):
            record["colour"]
        with pytest.raises(KeyError):
            record["colour"] = "red"
        with pytest.raises(AttributeError):
            record.colour

    def test_unknown_keys_ignored_by_apply(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        record.apply_attributes({"colour": "red"})
        assert record.path == "scripts/util/helper.rb"

    def test_attributes_is_a_copy(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        record.attributes["name"] = "changed"
        assert record.name == "helper"


class TestPathAttributeCoupling:
    def test_attribute_write_repaths(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        record.name = "tool"
        assert record.path == "scripts/util/tool.rb"
        assert record.attributes == {"name": "tool"}

    def test_item_write_repaths(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        record["name"] = "tool"
        assert record.path == "scripts/util/tool.rb"

    def test_none_keeps_segment(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        record.name = None
        assert record.path == "scripts/util/helper.rb"
        assert record.name == "helper"

    def test_empty_value_is_rejected(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        with pytest.raises(PathMismatchError):
            record.name = ""
        assert record.path == "scripts/util/helper.rb"
        assert record.name == "helper"

    def test_separator_in_value_is_rejected(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        with pytest.raises(PathMismatchError):
            record.name = "a/b"
        assert record.name == "helper"

    def test_path_write_reparses(self, docs):
        record = docs.new(path="p1/t1.txt")
        record.path = "p2/t2.md"
        assert record.attributes == {"project": "p2", "title": "t2", "ext": "md"}

    def test_path_write_mismatch(self, docs):
        record = docs.new(path="p1/t1.txt")
        with pytest.raises(PathMismatchError):
            record.path = "no-extension"
        assert record.path == "p1/t1.txt"

    def test_clearing_path_clears_attributes(self, docs):
        record = docs.new(path="p1/t1.txt")
        record.path = None
        assert record.attributes == {"project": None, "title": None, "ext": None}
        assert record.new_record is True

    def test_pending_until_path_matches(self, docs):
        record = docs.new()
        assert record.path is None
        record.project = "p1"
        assert record.path is None
        assert record.project == "p1"
        record.title = "t1"
        assert record.path == "p1/t1.ext"
        record.ext = "md"
        assert record.path == "p1/t1.md"

    def test_pending_on_wildcard_location(self, scripts):
        record = scripts.new()
        record.name = "helper"
        assert record.path is None
        assert record.name == "helper"

    def test_constructor_keywords(self, docs):
        record = docs.new(project="p", title="t", ext="txt", body="hello")
        assert record.path == "p/t.txt"
        assert record.body == b"hello"


class TestBody:
    def test_body_types(self, scripts):
        record = scripts.new()
        record.body = "é"
        assert record.body == "é".encode("utf-8")
        record.body = bytearray(b"raw")
        assert record.body == b"raw"
        record.body = None
        assert record.body == b""


class TestIdentity:
    def test_id_and_str(self, scripts, write):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        assert record.id == "scripts/util/helper~rb"
        assert record.to_param() == record.id
        assert str(record) == "scripts/util/helper~rb"

    def test_unsaved_has_no_id(self, scripts):
        record = scripts.new()
        assert record.id is None
        assert str(record) == ""

    def test_to_dict(self, scripts, write):
        write("scripts/util/helper.rb")
        data = scripts.get("scripts/util/helper.rb").to_dict()
        assert data == {
            "record_type": "scripts",
            "path": "scripts/util/helper.rb",
            "id": "scripts/util/helper~rb",
            "attributes": {"name": "helper"},
            "is_new": False,
        }

    def test_repr(self, scripts, write):
        write("scripts/util/helper.rb")
        assert repr(scripts.get("scripts/util/helper.rb")).endswith(":'scripts/util/helper.rb' name=helper>")

    def test_equality(self, scripts, write):
        write("scripts/util/helper.rb")
        a = scripts.get("scripts/util/helper.rb")
        b = scripts.get("scripts/util/helper.rb")
        assert a == b
        assert scripts.new() != scripts.new()

    def test_unhashable(self, scripts):
        with pytest.raises(TypeError):
            hash(scripts.new())

    def test_full_path(self, scripts, write, base_dir):
        write("scripts/util/helper.rb")
        record = scripts.get("scripts/util/helper.rb")
        assert record.full_path == (base_dir / "scripts" / "util" / "helper.rb").resolve()
        assert scripts.new().full_path is None


class TestBinding:
    def test_unbound_record_cannot_be_built(self):
        with pytest.raises(TypeError):
            Record()

    def test_generated_class_per_store(self, make_store):
        first = make_store(["a", "{name}", None], name="first_kind")
        second = make_store(["b", "{name}", None], name="second_kind")
        assert first.record_class is not second.record_class
        assert first.record_class.objects is first
        assert first.record_class.__name__ == "FirstKindRecord"

    def test_placeholder_colliding_with_member(self, make_store):
        with pytest.raises(LocationSpecError):
            make_store(["{path}", None], name="bad")
        with pytest.raises(LocationSpecError):
            make_store(["{errors}", None], name="bad")
        with pytest.raises(LocationSpecError):
            make_store(["{save}", None], name="bad")
