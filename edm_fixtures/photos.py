"""
Second scenario namespace with a media resource entity.
"""

from typing import Annotated

from odata_edm_lib import (
    EdmFacets,
    EdmKey,
    EdmMediaResourceContent,
    EdmProperty,
    edm_entity_set,
    edm_entity_type,
)

from . import NAMESPACE_2


@edm_entity_type(namespace=NAMESPACE_2)
@edm_entity_set(name="Photos", container="Container2")
class Photo:
    id: Annotated[int, EdmKey(), EdmProperty(name="Id")]
    type: Annotated[str, EdmKey(), EdmProperty(name="Type", facets=EdmFacets(nullable=False, max_length=8))]
    name: Annotated[str, EdmProperty(name="Name")]
    mime_type: Annotated[str, EdmProperty(name="MimeType")]
    image: Annotated[bytes, EdmMediaResourceContent()]
    comment: str
