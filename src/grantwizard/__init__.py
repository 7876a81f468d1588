"""
Grant Wizard

Select database objects, pick grantees and privileges, review the generated
GRANT/REVOKE statements and apply them.
"""

__version__ = "0.1.0"

from .config import ConnectionConfig
from .edit_model import GrantEditModel
from .models import DatabaseObject, ObjectClass, ObjectType, PrivilegeGrantRow
from .resolver import resolve_privileges
from .selection import ObjectSelection
from .workflow import GrantWorkflow, PreviewStatus, Stage

__all__ = [
    "__version__",
    "ConnectionConfig",
    "DatabaseObject",
    "GrantEditModel",
    "GrantWorkflow",
    "ObjectClass",
    "ObjectSelection",
    "ObjectType",
    "PreviewStatus",
    "PrivilegeGrantRow",
    "Stage",
    "resolve_privileges",
]
