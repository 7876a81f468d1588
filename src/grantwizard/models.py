"""
Pydantic models for the grant wizard.

Objects come from the database object catalog; grant rows are authored by the
operator while editing privileges.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ObjectType(str, Enum):
    """Object types as labelled by the object catalog"""

    TABLE = "Table"
    VIEW = "View"
    MATERIALIZED_VIEW = "Materialized View"
    SEQUENCE = "Sequence"
    FUNCTION = "Function"
    TRIGGER_FUNCTION = "Trigger Function"
    PROCEDURE = "Procedure"
    FOREIGN_TABLE = "Foreign Table"
    PACKAGE = "Package"


class ObjectClass(str, Enum):
    """Coarse object class used to look up grantable privileges"""

    TABLE = "table"
    SEQUENCE = "sequence"
    FUNCTION = "function"
    PROCEDURE = "procedure"
    FOREIGN_TABLE = "foreign_table"
    PACKAGE = "package"
    UNMAPPED = "unmapped"


OBJECT_CLASS_BY_TYPE: Dict[ObjectType, ObjectClass] = {
    ObjectType.TABLE: ObjectClass.TABLE,
    ObjectType.VIEW: ObjectClass.TABLE,
    ObjectType.MATERIALIZED_VIEW: ObjectClass.TABLE,
    ObjectType.SEQUENCE: ObjectClass.SEQUENCE,
    ObjectType.FUNCTION: ObjectClass.FUNCTION,
    ObjectType.TRIGGER_FUNCTION: ObjectClass.FUNCTION,
    ObjectType.PROCEDURE: ObjectClass.PROCEDURE,
    ObjectType.FOREIGN_TABLE: ObjectClass.FOREIGN_TABLE,
    ObjectType.PACKAGE: ObjectClass.PACKAGE,
}

# Object types rendered with their argument signature: every routine kind,
# not only plain functions
FUNCTION_LIKE_TYPES = frozenset(
    {ObjectType.FUNCTION, ObjectType.TRIGGER_FUNCTION, ObjectType.PROCEDURE}
)

CapabilityCatalog = Dict[ObjectClass, List[str]]


def normalize_object_type(object_type: Optional[ObjectType]) -> ObjectClass:
    """Map an object type to its object class (UNMAPPED when unknown)"""
    if object_type is None:
        return ObjectClass.UNMAPPED
    return OBJECT_CLASS_BY_TYPE.get(object_type, ObjectClass.UNMAPPED)


class DatabaseObject(BaseModel):
    """One row of the object catalog"""

    id: str
    object_type: Optional[ObjectType] = Field(None, alias="objectType")
    schema_name: str = Field(..., alias="schema")
    name: str
    arg_signature: Optional[str] = Field(None, alias="argSignature")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def object_class(self) -> ObjectClass:
        return normalize_object_type(self.object_type)

    @property
    def display_name(self) -> str:
        """Name shown in the object list; function-like objects carry their arguments"""
        if self.object_type in FUNCTION_LIKE_TYPES:
            return f"{self.name}({self.arg_signature or ''})"
        return self.name


class PrivilegeGrantRow(BaseModel):
    """Grantee with the privileges to grant (or revoke) on every selected object

    Privileges listed in with_grant_option are granted WITH GRANT OPTION.
    """

    grantee: Optional[str] = None
    privileges: List[str] = Field(default_factory=list)
    with_grant_option: List[str] = Field(default_factory=list, alias="withGrantOption")
    revoke: bool = False

    class Config:
        populate_by_name = True

    @property
    def is_valid(self) -> bool:
        return bool(self.grantee and self.grantee.strip()) and len(self.privileges) > 0

    def has_grant_option(self, privilege: str) -> bool:
        return privilege in self.with_grant_option
