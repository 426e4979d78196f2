#!/usr/bin/env python3
"""Unit tests for metadata extraction from annotated classes."""

from __future__ import annotations

import datetime
import enum
import unittest
import uuid
from decimal import Decimal
from typing import Annotated, List, Optional, Tuple

from odata_edm_lib import (
    EdmConfigurationError,
    EdmEntitySet,
    EdmKey,
    EdmNavigationProperty,
    EdmSimpleTypeKind,
    MetadataExtractor,
    Multiplicity,
    edm_entity_set,
    edm_entity_type,
    edm_function_import,
)
from odata_edm_lib.extractor import split_hint
from odata_edm_lib.hierarchy import TypeHierarchy

from edm_fixtures import photos, ref_model


class Color(enum.IntEnum):
    RED = 1


@edm_entity_type()
class Node:
    id: Annotated[int, EdmKey()]
    parent: Annotated[Optional[Node], EdmNavigationProperty()]
    children: Annotated[List[Node], EdmNavigationProperty()]


@edm_entity_type(namespace="ambiguous")
class Squad:
    id: Annotated[int, EdmKey()]
    leader: Annotated[Member, EdmNavigationProperty()]
    members: Annotated[List[Member], EdmNavigationProperty()]


@edm_entity_type(namespace="ambiguous")
class Member:
    id: Annotated[int, EdmKey()]
    squad: Annotated[Squad, EdmNavigationProperty()]


@edm_entity_type(namespace="named")
class Club:
    id: Annotated[int, EdmKey()]
    president: Annotated[Person, EdmNavigationProperty(association="Presidency", to_role="President")]
    members: Annotated[List[Person], EdmNavigationProperty(association="Membership")]


@edm_entity_type(namespace="named")
class Person:
    id: Annotated[int, EdmKey()]
    club: Annotated[Club, EdmNavigationProperty(association="Membership")]
    presides: Annotated[Optional[Club], EdmNavigationProperty(association="Presidency")]


@edm_entity_type(namespace="broken")
class KeyedNavigation:
    owner: Annotated[Node, EdmKey(), EdmNavigationProperty()]


@edm_entity_type(namespace="hierarchy")
class Animal:
    id: Annotated[int, EdmKey()]


class Mammal(Animal):
    pass


@edm_entity_type(namespace="hierarchy")
@edm_entity_set()
class Dog(Mammal):
    barks: bool


class Operations:

    @edm_function_import(http_method="fetch")
    def bad_verb(self) -> int:
        raise NotImplementedError

    @staticmethod
    @edm_function_import()
    def static_operation() -> List[str]:
        raise NotImplementedError


class TestSplitHint(unittest.TestCase):
    """Tests for taking type hints apart."""

    def test_annotated_optional_collection(self):
        target, is_collection, is_optional, markers = split_hint(Annotated[Optional[List[int]], "x"])
        self.assertIs(target, int)
        self.assertTrue(is_collection)
        self.assertTrue(is_optional)
        self.assertEqual(markers, ("x",))

    def test_optional_wrapping_annotated(self):
        target, is_collection, is_optional, markers = split_hint(Optional[Annotated[str, "m"]])
        self.assertIs(target, str)
        self.assertFalse(is_collection)
        self.assertTrue(is_optional)
        self.assertEqual(markers, ("m",))

    def test_pipe_union_and_variadic_tuple(self):
        self.assertEqual(split_hint(int | None), (int, False, True, ()))
        self.assertEqual(split_hint(Tuple[str, ...]), (str, True, False, ()))

    def test_plain_type(self):
        self.assertEqual(split_hint(bytes), (bytes, False, False, ()))


class TestTypeMapping(unittest.TestCase):
    """Tests for mapping Python types to Edm primitive types."""

    def setUp(self):
        self.extractor = MetadataExtractor()

    def test_default_mapping(self):
        expected = {
            str: EdmSimpleTypeKind.STRING,
            bool: EdmSimpleTypeKind.BOOLEAN,
            int: EdmSimpleTypeKind.INT32,
            float: EdmSimpleTypeKind.DOUBLE,
            Decimal: EdmSimpleTypeKind.DECIMAL,
            bytes: EdmSimpleTypeKind.BINARY,
            datetime.datetime: EdmSimpleTypeKind.DATE_TIME,
            datetime.date: EdmSimpleTypeKind.DATE_TIME,
            datetime.time: EdmSimpleTypeKind.TIME,
            uuid.UUID: EdmSimpleTypeKind.GUID,
        }
        for python_type, kind in expected.items():
            self.assertEqual(self.extractor.map_type(python_type), kind, python_type)

    def test_subclass_uses_parent_mapping(self):
        self.assertEqual(self.extractor.map_type(Color), EdmSimpleTypeKind.INT32)

    def test_unsupported_type(self):
        with self.assertRaises(EdmConfigurationError):
            self.extractor.map_type(dict)
        with self.assertRaises(EdmConfigurationError):
            self.extractor.map_type(None)

    def test_declared_kind(self):
        self.assertEqual(self.extractor.edm_kind("Edm.Int64"), EdmSimpleTypeKind.INT64)
        self.assertEqual(self.extractor.edm_kind(EdmSimpleTypeKind.BYTE), EdmSimpleTypeKind.BYTE)
        with self.assertRaises(EdmConfigurationError):
            self.extractor.edm_kind("Int64")


class TestClassMetadata(unittest.TestCase):
    """Tests for class level metadata queries."""

    def setUp(self):
        self.extractor = MetadataExtractor()

    def test_builtin_types_are_not_annotated(self):
        self.assertFalse(self.extractor.is_edm_annotated(str))
        self.assertFalse(self.extractor.is_edm_annotated(int))
        self.assertFalse(self.extractor.is_edm_annotated("Building"))

    def test_metadata_is_not_inherited(self):
        self.assertTrue(self.extractor.is_entity_type(Animal))
        self.assertFalse(self.extractor.is_entity_type(Mammal))
        self.assertFalse(self.extractor.is_edm_annotated(Mammal))

    def test_function_imports_make_a_class_annotated(self):
        self.assertTrue(self.extractor.is_edm_annotated(ref_model.ServiceOperations))

    def test_default_names(self):
        fqn = self.extractor.entity_type_fqn(Node)
        self.assertEqual(fqn.namespace, __name__)
        self.assertEqual(fqn.name, "Node")
        self.assertEqual(self.extractor.entity_set_name(Dog), "Dogs")
        self.assertEqual(self.extractor.entity_set_info(Dog), EdmEntitySet())
        self.assertEqual(self.extractor.container_name(Dog), "DefaultContainer")

    def test_container_name(self):
        self.assertEqual(self.extractor.container_name(ref_model.Building), "Container1")
        self.assertEqual(self.extractor.container_name(ref_model.ServiceOperations), "Container1")
        self.assertTrue(self.extractor.is_default_container(ref_model.Building))
        self.assertFalse(self.extractor.is_default_container(ref_model.Room))

    def test_abstract(self):
        self.assertTrue(self.extractor.is_abstract(ref_model.RefBase))
        self.assertFalse(self.extractor.is_abstract(ref_model.Building))

    def test_base_resolution_skips_plain_ancestors(self):
        hierarchy = TypeHierarchy.build([Dog, Animal])
        self.assertIs(hierarchy.resolve_base(Dog, self.extractor.is_entity_type), Animal)
        self.assertIsNone(hierarchy.resolve_base(Animal, self.extractor.is_entity_type))
        self.assertEqual(hierarchy.ancestors(Dog), (Mammal, Animal))


class TestFieldMetadata(unittest.TestCase):
    """Tests for field level metadata queries."""

    def setUp(self):
        self.extractor = MetadataExtractor()

    def _field(self, klass, name):
        return next(f for f in self.extractor.declared_fields(klass) if f.name == name)

    def test_declared_fields_are_own_fields_in_order(self):
        names = [f.name for f in self.extractor.declared_fields(ref_model.Building)]
        self.assertEqual(names, ["image", "rooms"])
        self.assertEqual(self.extractor.declared_fields(Mammal), [])

    def test_field_queries(self):
        photo_fields = {f.name: f for f in self.extractor.declared_fields(photos.Photo)}
        self.assertTrue(self.extractor.is_key(photo_fields["id"]))
        self.assertTrue(self.extractor.is_media_resource(photo_fields["image"]))
        self.assertTrue(self.extractor.has_other_markers(photo_fields["image"]))
        self.assertFalse(self.extractor.has_other_markers(photo_fields["comment"]))
        self.assertEqual(self.extractor.property_name(photo_fields["mime_type"]), "MimeType")
        self.assertEqual(self.extractor.property_name(photo_fields["comment"]), "comment")

    def test_collection_navigation_field(self):
        rooms = self._field(ref_model.Building, "rooms")
        self.assertIs(rooms.target, ref_model.Room)
        self.assertTrue(rooms.is_collection)
        self.assertTrue(self.extractor.is_navigation(rooms))
        self.assertEqual(self.extractor.property_name(rooms), "nb_Rooms")


class TestNavigationInfo(unittest.TestCase):
    """Tests for deriving relationships from navigation pairs."""

    def setUp(self):
        self.extractor = MetadataExtractor()

    def _info(self, klass, name):
        field = next(f for f in self.extractor.declared_fields(klass) if f.name == name)
        return self.extractor.navigation_info(field)

    def test_derivation_is_order_independent(self):
        from_building = self._info(ref_model.Building, "rooms")
        from_room = self._info(ref_model.Room, "building")

        self.assertEqual(from_building.relationship_name, "Building_Room")
        self.assertEqual(from_room.relationship_name, "Building_Room")
        self.assertEqual((from_building.from_role, from_building.to_role), ("r_Building", "r_Room"))
        self.assertEqual((from_room.from_role, from_room.to_role), ("r_Room", "r_Building"))
        self.assertEqual(from_building.from_multiplicity, Multiplicity.ONE)
        self.assertEqual(from_building.to_multiplicity, Multiplicity.MANY)
        self.assertEqual(from_room.from_multiplicity, Multiplicity.MANY)
        self.assertEqual(from_room.to_multiplicity, Multiplicity.ONE)
        self.assertEqual(from_building.from_type_name, "Building")
        self.assertEqual(from_building.to_type_name, "Room")
        self.assertEqual(str(from_building.relationship_fqn), "RefScenario.Building_Room")
        self.assertEqual(from_room.relationship_fqn, from_building.relationship_fqn)

    def test_optional_navigation_is_zero_to_one(self):
        info = self._info(ref_model.Employee, "manager")
        self.assertEqual(info.relationship_name, "Employee_Manager")
        self.assertEqual(info.to_multiplicity, Multiplicity.ZERO_TO_ONE)
        self.assertEqual(info.from_multiplicity, Multiplicity.MANY)

    def test_self_relation_roles_are_distinct(self):
        parent = self._info(Node, "parent")
        children = self._info(Node, "children")

        self.assertEqual((parent.from_role, parent.to_role), ("r_Node_children", "r_Node_parent"))
        self.assertEqual((children.from_role, children.to_role), ("r_Node_parent", "r_Node_children"))
        self.assertEqual(parent.relationship_name, children.relationship_name)
        self.assertEqual(parent.relationship_name, "Node_children_Node_parent")

    def test_ambiguous_navigation_is_rejected(self):
        with self.assertRaises(EdmConfigurationError):
            self._info(Squad, "leader")
        with self.assertRaises(EdmConfigurationError):
            self._info(Member, "squad")

    def test_named_associations(self):
        president = self._info(Club, "president")
        presides = self._info(Person, "presides")
        self.assertEqual(president.relationship_name, "Presidency")
        self.assertEqual(president.to_role, "President")
        self.assertEqual(presides.from_role, "President")
        self.assertEqual(presides.to_role, "r_Club")
        self.assertEqual(self._info(Club, "members").relationship_name, "Membership")

    def test_key_and_navigation_is_contradictory(self):
        with self.assertRaises(EdmConfigurationError):
            self._info(KeyedNavigation, "owner")


class TestFunctionImportMetadata(unittest.TestCase):
    """Tests for function import metadata on methods."""

    def setUp(self):
        self.extractor = MetadataExtractor()
        self.operations = {name: (member, record)
                           for name, member, record in self.extractor.function_imports(ref_model.ServiceOperations)}

    def test_function_imports_in_declaration_order(self):
        self.assertEqual(list(self.operations),
                         ["search_employees", "maximal_age", "oldest_employee", "manager_photo"])

    def test_parameters_and_return_type(self):
        member, record = self.operations["search_employees"]
        self.assertEqual(self.extractor.function_import_name("search_employees", record), "EmployeeSearch")
        self.assertEqual(self.extractor.http_method(record), "GET")
        parameters = self.extractor.function_import_parameters(member)
        self.assertEqual([p.name for p in parameters], ["q"])
        self.assertEqual(parameters[0].type, EdmSimpleTypeKind.STRING)
        return_type = self.extractor.return_type(member, record)
        self.assertEqual(return_type.type_name, "RefScenario.Employee")
        self.assertEqual(return_type.multiplicity, Multiplicity.MANY)

    def test_explicit_return_type(self):
        member, record = self.operations["maximal_age"]
        return_type = self.extractor.return_type(member, record)
        self.assertEqual(return_type.type_name, "Edm.Int16")
        self.assertEqual(return_type.multiplicity, Multiplicity.ONE)

    def test_static_method_and_bad_verb(self):
        operations = {name: (member, record) for name, member, record in self.extractor.function_imports(Operations)}
        member, record = operations["static_operation"]
        self.assertIsNone(self.extractor.http_method(record))
        self.assertEqual(self.extractor.return_type(member, record).type_name, "Edm.String")

        _, record = operations["bad_verb"]
        with self.assertRaises(EdmConfigurationError):
            self.extractor.http_method(record)


if __name__ == "__main__":
    unittest.main()
