import pytest

from eventindex.schema.fields import BOOLEAN, DATE, KEYWORD, OBJECT, TEXT
from eventindex.schema.registry import FieldRegistry, SchemaConflict


def test_build_returns_declared_fields_with_implicit_parents():
	registry = FieldRegistry()
	registry.declare("data.@request.user_agent", TEXT, alias="useragent", keyword=True)

	schema = registry.build()

	assert schema.get("data.@request.user_agent").type == TEXT
	assert schema.get("data").type == OBJECT
	assert schema.get("data.@request").type == OBJECT
	assert schema.aliases().resolve("useragent") == "data.@request.user_agent"


def test_duplicate_alias_is_a_conflict():
	registry = FieldRegistry()
	registry.declare("message", TEXT, alias="message")
	registry.declare("data.@user_description.description", TEXT, alias="message")

	with pytest.raises(SchemaConflict) as excinfo:
		registry.build()

	assert len(excinfo.value.problems) == 1
	assert "alias 'message'" in excinfo.value.problems[0]


def test_redeclared_with_different_type_is_a_conflict():
	registry = FieldRegistry()
	registry.declare("count", KEYWORD, alias="count")
	registry.declare("count", BOOLEAN)

	with pytest.raises(SchemaConflict, match="redeclared as boolean"):
		registry.build()


def test_same_type_redeclaration_merges_options():
	registry = FieldRegistry()
	registry.declare("tags", TEXT, alias="tag")
	registry.declare("tags", TEXT, keyword=True, boost=1.2)

	descriptor = registry.build().get("tags")

	assert descriptor.alias == "tag"
	assert descriptor.keyword is True
	assert descriptor.boost == 1.2


def test_same_type_redeclaration_with_second_alias_is_a_conflict():
	registry = FieldRegistry()
	registry.declare("tags", TEXT, alias="tag")
	registry.declare("tags", TEXT, alias="tags")

	with pytest.raises(SchemaConflict, match="alias='tags'"):
		registry.build()


def test_empty_alias_is_rejected():
	registry = FieldRegistry()
	registry.declare("source", TEXT, alias="  ")

	with pytest.raises(SchemaConflict, match="empty alias"):
		registry.build()


def test_field_nested_under_leaf_is_a_conflict():
	registry = FieldRegistry()
	registry.declare("message", TEXT, alias="message")
	registry.declare("message.length", KEYWORD, alias="length")

	with pytest.raises(SchemaConflict, match="nested under text field 'message'"):
		registry.build()


def test_dynamic_only_allowed_on_objects():
	registry = FieldRegistry()
	registry.declare("message", TEXT, alias="message", dynamic=True)

	with pytest.raises(SchemaConflict, match="only objects can be dynamic"):
		registry.build()


def test_all_problems_are_reported_together():
	registry = FieldRegistry()
	registry.declare("a", TEXT, alias="x")
	registry.declare("b", TEXT, alias="x")
	registry.declare("c", KEYWORD, alias="c")
	registry.declare("c", DATE)

	with pytest.raises(SchemaConflict) as excinfo:
		registry.build()

	assert len(excinfo.value.problems) == 2


def test_unknown_type_is_rejected():
	registry = FieldRegistry()
	registry.declare("payload", "blob", alias="payload")

	with pytest.raises(SchemaConflict, match="unknown type 'blob'"):
		registry.build()


def test_extend_collects_declarations_from_several_contributors():
	def core(registry):
		registry.declare("id", KEYWORD, alias="id")

	def derived(registry):
		registry.project(["data.@environment.os_name"], "os")

	schema = FieldRegistry().extend(core).extend(derived).build()

	assert schema.aliases().resolve("id") == "id"
	assert schema.aliases().resolve("os") == "os"


def test_mapping_nests_properties_and_closes_root():
	registry = FieldRegistry()
	registry.declare("data.@level", TEXT, alias="level", keyword=True)
	registry.object("idx", dynamic=True, alias="idx")
	registry.dynamic_template("idx_reference", match="*-r", mapping={"type": "keyword", "ignore_above": 256})

	mapping = registry.build().mapping()

	assert mapping["dynamic"] is False
	assert mapping["dynamic_templates"] == [
		{"idx_reference": {"match": "*-r", "mapping": {"type": "keyword", "ignore_above": 256}}}
	]
	level = mapping["properties"]["data"]["properties"]["@level"]
	assert level["type"] == "text"
	assert level["fields"]["keyword"] == {"type": "keyword", "ignore_above": 256}
	assert mapping["properties"]["idx"] == {"type": "object", "dynamic": True}
	assert "dynamic" not in mapping["properties"]["data"]


def test_duplicate_dynamic_template_is_a_conflict():
	registry = FieldRegistry()
	registry.dynamic_template("refs", match="*-r", mapping={"type": "keyword"})
	registry.dynamic_template("refs", match="*-ref", mapping={"type": "keyword"})

	with pytest.raises(SchemaConflict, match="dynamic template 'refs'"):
		registry.build()


def test_search_fields_include_boosts():
	registry = FieldRegistry()
	registry.declare("message", TEXT, alias="message", include_in_all=True)
	registry.declare("tags", TEXT, alias="tag", include_in_all=True, boost=1.2)
	registry.declare("type", KEYWORD, alias="type")

	assert registry.build().search_fields() == ["message", "tags^1.2"]


def test_schema_fields_are_read_only():
	registry = FieldRegistry()
	registry.declare("id", KEYWORD, alias="id")
	schema = registry.build()

	with pytest.raises(TypeError):
		schema.fields["other"] = None


def test_alias_with_surrounding_whitespace_is_rejected():
	registry = FieldRegistry()
	registry.declare("data.@environment.machine_name", TEXT, alias="machine ")

	with pytest.raises(SchemaConflict, match="alias 'machine ' has surrounding whitespace"):
		registry.build()


def test_aliases_differing_only_by_whitespace_are_duplicates():
	registry = FieldRegistry()
	registry.declare("a", KEYWORD, alias="os")
	registry.declare("b", KEYWORD, alias=" os")

	with pytest.raises(SchemaConflict) as excinfo:
		registry.build()

	assert "alias 'os' is used by a, b" in excinfo.value.problems


def test_every_alias_round_trips_to_its_field():
	registry = FieldRegistry()
	registry.declare("data.@environment.machine_name", TEXT, alias="machine")
	registry.declare("data.@request.user_agent", TEXT, alias="useragent")
	registry.project(["data.@environment.os_name"], "os")
	aliases = registry.build().aliases()

	for alias, path in aliases.items():
		assert aliases.resolve(aliases.alias_of(path)) == path


def test_projected_source_cannot_have_its_own_alias():
	registry = FieldRegistry()
	registry.declare("data.@environment.os_name", TEXT, alias="osname")
	registry.project(["data.@environment.os_name"], "os")

	with pytest.raises(SchemaConflict, match="projected field 'data.@environment.os_name' cannot have its own alias 'osname'"):
		registry.build()


def test_projecting_a_source_declared_with_another_type_is_a_conflict():
	registry = FieldRegistry()
	registry.declare("data.@environment.os_name", KEYWORD)
	registry.project(["data.@environment.os_name"], "os")

	with pytest.raises(SchemaConflict, match="redeclared as text, already keyword"):
		registry.build()


def test_projecting_into_a_field_declared_with_another_type_is_a_conflict():
	registry = FieldRegistry()
	registry.declare("os", KEYWORD, alias="os")
	registry.project(["data.@environment.os_name"], "os")

	with pytest.raises(SchemaConflict, match="field 'os' redeclared as text, already keyword"):
		registry.build()
