"""
Privilege edit model.

Holds the grantee rows being edited and the privileges the editing surface
may offer. Validation is a pure predicate over the rows.
"""

from typing import Dict, Iterable, List, Sequence

from grantwizard.models import PrivilegeGrantRow


def rows_are_valid(rows: Sequence[PrivilegeGrantRow]) -> bool:
    """True iff there is at least one row and every row has a grantee and privileges"""
    return len(rows) > 0 and all(row.is_valid for row in rows)


def validation_message(rows: Sequence[PrivilegeGrantRow]) -> str | None:
    """Describe the first problem with the rows, or None when they are valid"""
    if not rows:
        return "Please add at least one grantee."
    for index, row in enumerate(rows, 1):
        if not (row.grantee and row.grantee.strip()):
            return f"Row {index}: grantee cannot be empty."
        if not row.privileges:
            return f"Row {index}: select at least one privilege for '{row.grantee}'."
    return None


class GrantEditModel:
    """Editable grantee -> privileges table

    Privileges outside the offered set are not rejected here; the editing
    surface only offers members of `available_privileges`. Rows that still
    reference privileges withdrawn by a selection change are reported by
    `stale_privileges`.
    """

    def __init__(self, available_privileges: Iterable[str] = ()) -> None:
        self._available: List[str] = list(available_privileges)
        self._rows: List[PrivilegeGrantRow] = []

    @property
    def available_privileges(self) -> List[str]:
        return list(self._available)

    @property
    def rows(self) -> List[PrivilegeGrantRow]:
        return list(self._rows)

    def set_available_privileges(self, privileges: Iterable[str]) -> bool:
        """Update the offered privileges; returns True if the set changed"""
        updated = list(privileges)
        changed = updated != self._available
        self._available = updated
        return changed

    def set_rows(self, rows: Iterable[PrivilegeGrantRow]) -> None:
        self._rows = list(rows)

    def clear(self) -> None:
        self._rows = []

    def is_valid(self) -> bool:
        return rows_are_valid(self._rows)

    def validation_message(self) -> str | None:
        return validation_message(self._rows)

    def stale_privileges(self) -> Dict[int, List[str]]:
        """Row index -> privileges that are no longer offered"""
        stale: Dict[int, List[str]] = {}
        for index, row in enumerate(self._rows):
            missing = [p for p in row.privileges if p not in self._available]
            if missing:
                stale[index] = missing
        return stale
