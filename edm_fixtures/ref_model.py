"""
Reference scenario: buildings, rooms, employees, managers and teams.
"""

from __future__ import annotations

import datetime
from typing import Annotated, List, Optional

from odata_edm_lib import (
    EdmConcurrencyControl,
    EdmFacets,
    EdmFunctionImportParameter,
    EdmKey,
    EdmNavigationProperty,
    EdmProperty,
    EdmReturnType,
    EdmSimpleTypeKind,
    edm_complex_type,
    edm_entity_container,
    edm_entity_set,
    edm_entity_type,
    edm_function_import,
)

from . import NAMESPACE_1

CONTAINER_1 = "Container1"


@edm_complex_type(namespace=NAMESPACE_1, name="c_City")
class City:
    postal_code: Annotated[str, EdmProperty(name="PostalCode")]
    city_name: Annotated[str, EdmProperty(name="CityName")]


@edm_complex_type(namespace=NAMESPACE_1, name="c_Location")
class Location:
    country: Annotated[str, EdmProperty(name="Country")]
    city: Annotated[City, EdmProperty(name="City")]


@edm_entity_type(namespace=NAMESPACE_1, abstract=True)
class RefBase:
    id: Annotated[str, EdmKey(), EdmProperty(name="Id", facets=EdmFacets(nullable=False))]
    name: Annotated[str, EdmProperty(name="Name")]


@edm_entity_type(namespace=NAMESPACE_1)
@edm_entity_set(name="Buildings", container=CONTAINER_1)
@edm_entity_container(name=CONTAINER_1, default=True)
class Building(RefBase):
    image: Annotated[bytes, EdmProperty(name="Image")]
    rooms: Annotated[List[Room], EdmNavigationProperty(name="nb_Rooms")]


@edm_entity_type(namespace=NAMESPACE_1)
@edm_entity_set(name="Rooms", container=CONTAINER_1)
class Room(RefBase):
    seats: Annotated[int, EdmProperty(name="Seats")]
    version: Annotated[int, EdmProperty(name="Version"), EdmConcurrencyControl()]
    building: Annotated[Building, EdmNavigationProperty(name="nr_Building")]
    employees: Annotated[List[Employee], EdmNavigationProperty(name="nr_Employees")]


@edm_entity_type(namespace=NAMESPACE_1)
@edm_entity_set(name="Teams", container=CONTAINER_1)
class Team(RefBase):
    is_scrum_team: Annotated[bool, EdmProperty(name="IsScrumTeam")]
    employees: Annotated[List[Employee], EdmNavigationProperty(name="nt_Employees")]


@edm_entity_type(namespace=NAMESPACE_1)
@edm_entity_set(name="Employees", container=CONTAINER_1)
class Employee(RefBase):
    age: Annotated[int, EdmProperty(name="Age")]
    entry_date: Annotated[datetime.datetime, EdmProperty(name="EntryDate")]
    image_url: Annotated[str, EdmProperty(name="ImageUrl", facets=EdmFacets(max_length=1024))]
    salary: Annotated[float, EdmProperty(name="Salary", type=EdmSimpleTypeKind.DECIMAL,
                                         facets=EdmFacets(precision=10, scale=2))]
    location: Annotated[Location, EdmProperty(name="Location")]
    manager: Annotated[Optional[Manager], EdmNavigationProperty(name="ne_Manager")]
    team: Annotated[Team, EdmNavigationProperty(name="ne_Team")]
    room: Annotated[Room, EdmNavigationProperty(name="ne_Room")]


@edm_entity_type(namespace=NAMESPACE_1)
@edm_entity_set(name="Managers", container=CONTAINER_1)
class Manager(Employee):
    employees: Annotated[List[Employee], EdmNavigationProperty(name="nm_Employees")]


@edm_entity_container(name=CONTAINER_1)
class ServiceOperations:

    @edm_function_import(name="EmployeeSearch", entity_set="Employees", http_method="GET")
    def search_employees(self, q: Annotated[str, EdmFunctionImportParameter(name="q")]) -> List[Employee]:
        raise NotImplementedError

    @edm_function_import(name="MaximalAge", http_method="GET",
                         return_type=EdmReturnType(type=EdmSimpleTypeKind.INT16))
    def maximal_age(self):
        raise NotImplementedError

    @edm_function_import(name="OldestEmployee", entity_set="Employees", http_method="GET")
    def oldest_employee(self) -> Employee:
        raise NotImplementedError

    @edm_function_import(name="ManagerPhoto", http_method="GET")
    def manager_photo(self, id: Annotated[str, EdmFunctionImportParameter(
            name="Id", facets=EdmFacets(nullable=False))]) -> bytes:
        raise NotImplementedError
