"""
Privilege capability resolver.

Derives the privileges that may be offered for the current selection from the
capability catalog.
"""

from typing import Iterable, List, Mapping, Sequence, Union

from grantwizard.models import DatabaseObject, ObjectClass
from grantwizard.selection import ObjectSelection


def resolve_privileges(
    selection: Union[ObjectSelection, Iterable[DatabaseObject]],
    catalog: Mapping[ObjectClass, Sequence[str]],
) -> List[str]:
    """Return the union of privileges grantable on the selected objects.

    Classes are visited in the order they first appear in the selection and
    each contributes its catalog privileges in catalog order; duplicates are
    elided. Classes missing from the catalog (including UNMAPPED) contribute
    nothing.

    Args:
        selection: Selected objects (an ObjectSelection or any iterable of objects)
        catalog: Object class -> ordered privilege codes

    Returns:
        Ordered, de-duplicated privilege codes
    """
    if isinstance(selection, ObjectSelection):
        classes = selection.object_classes()
    else:
        classes = ObjectSelection(selection).object_classes()

    privileges: List[str] = []
    for object_class in classes:
        for privilege in catalog.get(object_class, ()):
            if privilege not in privileges:
                privileges.append(privilege)
    return privileges
