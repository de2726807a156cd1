import logging
from dataclasses import dataclass
from typing import Optional

from schema_decorators import ArraySchema, MetadataStorage, ObjectSchema, PropertyRule, SchemaRegistry


def _shared_type(registry):
    class Shared:
        pass

    registry.add_rule(Shared, "id", {"type": "integer"}, required=True)
    return Shared


class TestDefineSchema:
    def test_no_rules_returns_base_schema_unregistered(self, registry):
        class Empty:
            pass

        base = ObjectSchema({"title": "Empty"})

        assert registry.define_schema(Empty, base) is base
        assert registry.get_schema_by_type(Empty) is None

    def test_composes_and_registers_by_type(self, registry):
        class Point:
            pass

        registry.add_rule(Point, "x", {"type": "number"}, required=True)
        registry.add_rule(Point, "y", {"type": "number"})
        base = ObjectSchema({"additionalProperties": False})

        composed = registry.define_schema(Point, base)

        assert composed is not base
        assert list(composed.fields) == ["x", "y"]
        assert composed.fields["x"] == PropertyRule({"type": "number"}, required=True)
        assert registry.get_schema_by_type(Point) is composed
        assert base.fields == {}

    def test_default_base_schema(self, registry):
        class Point:
            pass

        registry.add_rule(Point, "x", {"type": "number"})

        composed = registry.define_schema(Point)

        assert composed.to_json_schema() == {"type": "object", "properties": {"x": {"type": "number"}}}

    def test_subclass_schema_includes_inherited_rules(self, registry):
        class Base:
            pass

        class Derived(Base):
            pass

        registry.add_rule(Base, "x", {"type": "string"})
        registry.add_rule(Derived, "y", {"type": "integer"})
        registry.add_rule(Derived, "x", {"type": "string", "maxLength": 2})

        composed = registry.define_schema(Derived)

        assert list(composed.fields) == ["x", "y"]
        assert composed.fields["x"].fragment == {"type": "string", "maxLength": 2}

    def test_lookup_by_instance(self, registry):
        class Point:
            pass

        registry.add_rule(Point, "x", {"type": "number"})
        composed = registry.define_schema(Point)

        assert registry.get_schema_by_type(Point()) is composed

    def test_lookup_by_unhashable_instance(self, registry):
        @dataclass
        class Point:
            x: float = 0.0

        registry.add_rule(Point, "x", {"type": "number"})
        composed = registry.define_schema(Point)

        assert registry.get_schema_by_type(Point()) is composed

    def test_lookup_by_explicit_class_identity(self):
        parents = {"employee": "person", "person": None}
        registry = SchemaRegistry(MetadataStorage(parent_of=parents.get))
        registry.add_rule("person", "email", {"type": "string"}, required=True)
        registry.add_rule("employee", "employee_id", {"type": "integer"})

        person_schema = registry.define_schema("person")
        employee_schema = registry.define_schema("employee")

        assert registry.get_schema_by_type("person") is person_schema
        assert registry.get_schema_by_type("employee") is employee_schema
        assert list(employee_schema.fields) == ["email", "employee_id"]
        assert registry.get_schema_by_type("manager") is None



class TestRegisterNamed:
    def test_registers_under_name(self, registry):
        Shared = _shared_type(registry)

        composed = registry.register_named("shared", Shared)

        assert registry.get_schema_by_name("shared") is composed
        assert registry.get_schema_by_type(Shared) is composed

    def test_last_registration_wins(self, registry):
        class First:
            pass

        class Second:
            pass

        registry.add_rule(First, "a", {"type": "string"})
        registry.add_rule(Second, "b", {"type": "string"})

        registry.register_named("model", First)
        second = registry.register_named("model", Second)

        assert registry.get_schema_by_name("model") is second
        assert list(registry.get_schema_by_name("model").fields) == ["b"]

    def test_class_without_rules_is_not_named(self, registry):
        class Empty:
            pass

        base = ObjectSchema()

        assert registry.register_named("empty", Empty, base) is base
        assert registry.get_schema_by_name("empty") is None

    def test_unknown_name(self, registry):
        assert registry.get_schema_by_name("missing") is None


class TestResolveNestedSchema:
    def test_reuses_registered_schema(self, registry):
        Shared = _shared_type(registry)

        class Owner:
            pass

        class OtherOwner:
            pass

        first = registry.declare_nested(Owner, "shared", Shared)
        second = registry.declare_nested(OtherOwner, "shared", lambda: Shared)

        assert first is second
        assert registry.metadata.get_own_metadata(OtherOwner)["shared"].fragment is first

    def test_auto_discovers_undecorated_type(self, registry):
        Shared = _shared_type(registry)

        nested_schema = registry.resolve_nested_schema(Shared)

        assert list(nested_schema.fields) == ["id"]
        assert registry.get_schema_by_type(Shared) is nested_schema

    def test_predefined_schema_is_copied(self, registry):
        Shared = _shared_type(registry)
        predefined = ObjectSchema({"title": "Shared"})
        other_predefined = ObjectSchema({"title": "Other"})

        first = registry.resolve_nested_schema(Shared, predefined)
        second = registry.resolve_nested_schema(Shared, other_predefined)

        assert first is not predefined
        assert predefined.fields == {}
        assert other_predefined.fields == {}
        assert first.definition["title"] == "Shared"
        assert second.definition["title"] == "Other"
        assert registry.get_schema_by_type(Shared) is second

    def test_type_without_rules_is_skipped(self, registry):
        class Plain:
            pass

        class Owner:
            pass

        assert registry.resolve_nested_schema(Plain) is None
        assert registry.declare_nested(Owner, "plain", Plain) is None
        assert registry.metadata.get_own_metadata(Owner) is None

    def test_primitive_type_is_skipped(self, registry):
        assert registry.resolve_nested_schema(str) is None

    def test_predefined_schema_for_type_without_rules(self, registry):
        class Plain:
            pass

        predefined = ObjectSchema({"minProperties": 1})

        nested_schema = registry.resolve_nested_schema(Plain, predefined)

        assert nested_schema is not predefined
        assert nested_schema.definition == {"minProperties": 1}
        assert registry.get_schema_by_type(Plain) is None

    def test_type_being_composed_is_skipped(self, registry):
        Shared = _shared_type(registry)

        with registry.composing(Shared):
            assert registry.is_composing(Shared)
            assert registry.resolve_nested_schema(Shared) is None
            assert registry.resolve_nested_schema(Shared, ObjectSchema()) is None

        assert not registry.is_composing(Shared)

    def test_mutual_references_terminate(self, registry):
        class Left:
            pass

        class Right:
            pass

        registry.add_rule(Left, "name", {"type": "string"})
        registry.add_rule(Right, "name", {"type": "string"})

        right_schema = registry.declare_nested(Left, "right", Right)
        left_schema = registry.declare_nested(Right, "left", Left)

        assert list(right_schema.fields) == ["name"]
        assert list(left_schema.fields) == ["name", "right"]


class TestResolveArrayElementSchema:
    def test_wraps_element_schema(self, registry):
        Shared = _shared_type(registry)
        array_schema = ArraySchema({"minItems": 1})

        resolved = registry.resolve_array_element_schema(lambda: Shared, array_schema)

        assert resolved.element is registry.get_schema_by_type(Shared)
        assert resolved.to_json_schema() == {
            "type": "array",
            "minItems": 1,
            "items": {"type": "object", "properties": {"id": {"type": "integer"}}, "required": ["id"]},
        }
        assert array_schema.element is None

    def test_default_array_schema(self, registry):
        Shared = _shared_type(registry)

        resolved = registry.resolve_array_element_schema(lambda: Shared)

        assert isinstance(resolved, ArraySchema)
        assert resolved.element is registry.get_schema_by_type(Shared)

    def test_element_schema_is_used_as_base(self, registry):
        Shared = _shared_type(registry)

        resolved = registry.resolve_array_element_schema(
            lambda: Shared, element_schema=ObjectSchema({"additionalProperties": False})
        )

        assert resolved.element.definition == {"additionalProperties": False}
        assert list(resolved.element.fields) == ["id"]

    def test_element_without_rules_keeps_array_schema(self, registry):
        array_schema = ArraySchema({"maxItems": 3}).of({"type": "number"})

        assert registry.resolve_array_element_schema(lambda: int, array_schema) is array_schema

    def test_declare_nested_array(self, registry):
        Shared = _shared_type(registry)

        class Owner:
            pass

        resolved = registry.declare_nested_array(Owner, "items", Shared, required=True)

        rule = registry.metadata.get_own_metadata(Owner)["items"]
        assert rule == PropertyRule(resolved, required=True)


class TestResolveReflectedNestedSchema:
    def test_uses_annotation(self, registry):
        Shared = _shared_type(registry)

        class Owner:
            shared: Shared

        assert registry.resolve_reflected_nested_schema(Owner, "shared") is registry.get_schema_by_type(Shared)

    def test_unwraps_optional(self, registry):
        Shared = _shared_type(registry)

        class Owner:
            shared: Optional[Shared]

        assert registry.resolve_reflected_nested_schema(Owner, "shared") is registry.get_schema_by_type(Shared)

    def test_missing_annotation_is_skipped(self, registry, caplog):
        class Owner:
            pass

        with caplog.at_level(logging.WARNING, logger="schema_decorators.registry"):
            assert registry.resolve_reflected_nested_schema(Owner, "shared") is None

        assert "No class annotation found for" in caplog.text

    def test_unresolvable_annotation_is_skipped(self, registry):
        class Owner:
            shared: "UndefinedModel"  # noqa: F821

        assert registry.declare_reflected_nested(Owner, "shared") is None
        assert registry.metadata.get_own_metadata(Owner) is None

    def test_other_unresolvable_annotations_are_ignored(self, registry):
        Shared = _shared_type(registry)

        class Owner:
            shared: Shared
            later: "DefinedLater"  # noqa: F821

        nested_schema = registry.declare_reflected_nested(Owner, "shared")

        assert nested_schema is registry.get_schema_by_type(Shared)
        assert registry.define_schema(Owner).fields["shared"].fragment is nested_schema

    def test_inherited_annotation(self, registry):
        Shared = _shared_type(registry)

        class Base:
            shared: Shared

        class Owner(Base):
            later: "DefinedLater"  # noqa: F821

        assert registry.resolve_reflected_nested_schema(Owner, "shared") is registry.get_schema_by_type(Shared)

    def test_self_reference_is_skipped(self, registry):
        class TreeNode:
            label: str
            parent: "TreeNode"

        registry.add_rule(TreeNode, "label", {"type": "string"})

        assert registry.declare_reflected_nested(TreeNode, "parent") is None
        composed = registry.define_schema(TreeNode)
        assert list(composed.fields) == ["label"]

    def test_declare_with_predefined_schema(self, registry):
        Shared = _shared_type(registry)

        class Owner:
            shared: Shared

        predefined = ObjectSchema({"title": "Shared"})

        nested_schema = registry.declare_reflected_nested(Owner, "shared", predefined, required=True)

        assert nested_schema.definition["title"] == "Shared"
        assert registry.metadata.get_own_metadata(Owner)["shared"] == PropertyRule(nested_schema, required=True)
