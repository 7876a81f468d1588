"""
Object selection set.

Holds the objects the operator picked, in pick order, unique by id. The
selection is always replaced wholesale; there is no add/remove.
"""

from typing import Iterable, Iterator, List

from grantwizard.models import DatabaseObject, ObjectClass


class ObjectSelection:
    """Ordered, id-unique set of selected catalog objects"""

    def __init__(self, objects: Iterable[DatabaseObject] = ()) -> None:
        self._objects: List[DatabaseObject] = []
        self.set_selection(objects)

    def set_selection(self, objects: Iterable[DatabaseObject]) -> None:
        """Replace the selection; later duplicates of an id are ignored"""
        seen: set[str] = set()
        selected: List[DatabaseObject] = []
        for obj in objects:
            if obj.id in seen:
                continue
            seen.add(obj.id)
            selected.append(obj)
        self._objects = selected

    @property
    def objects(self) -> List[DatabaseObject]:
        return list(self._objects)

    def object_classes(self) -> List[ObjectClass]:
        """Distinct object classes in first-seen order"""
        classes: List[ObjectClass] = []
        for obj in self._objects:
            if obj.object_class not in classes:
                classes.append(obj.object_class)
        return classes

    def ids(self) -> List[str]:
        return [obj.id for obj in self._objects]

    def is_empty(self) -> bool:
        return not self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[DatabaseObject]:
        return iter(list(self._objects))
