"""
Local grant service.

Reads the object catalog (and optionally the privilege catalog) from a JSON
export and renders statements in-process. Applying writes the script to a
file; nothing is executed against a database.

File layout:

    {
      "acl": {"table": {"acl": ["a", "r", "w"]}, ...},
      "objects": [{"oid": 16384, "object_type": "Table", "nspname": "public", "name": "orders"}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path

from grantwizard.config import ConnectionConfig
from grantwizard.domain.errors import ApplyError, CatalogLoadError
from grantwizard.models import CapabilityCatalog, DatabaseObject, PrivilegeGrantRow
from grantwizard.privileges import default_capability_catalog
from grantwizard.services.http import parse_capability_catalog, parse_object
from grantwizard.statements import build_grant_statements, render_script


class LocalGrantService:
    """GrantService backed by a catalog export file

    Attributes:
        catalog_path: JSON catalog export
        output_path: Where apply_grants writes the script (None disables apply)
    """

    def __init__(self, catalog_path: Path, output_path: Path | None = None) -> None:
        self.catalog_path = catalog_path
        self.output_path = output_path
        self._capabilities: CapabilityCatalog | None = None

    async def load_capability_catalog(self, config: ConnectionConfig) -> CapabilityCatalog:
        data = self._read()
        if "acl" in data:
            try:
                self._capabilities = parse_capability_catalog(data["acl"])
            except (AttributeError, TypeError, ValueError) as e:
                raise CatalogLoadError(
                    f"Malformed privilege catalog in {self.catalog_path}: {e}", "catalog_load_failed"
                ) from e
        else:
            self._capabilities = default_capability_catalog()
        return self._capabilities

    async def load_object_catalog(self, config: ConnectionConfig) -> list[DatabaseObject]:
        rows = self._read().get("objects")
        if not isinstance(rows, list):
            raise CatalogLoadError(
                f"No 'objects' list in {self.catalog_path}", "catalog_load_failed"
            )
        try:
            return [parse_object(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogLoadError(f"Malformed object catalog row: {e}", "catalog_load_failed") from e

    async def preview_statements(
        self,
        config: ConnectionConfig,
        objects: list[DatabaseObject],
        rows: list[PrivilegeGrantRow],
    ) -> str:
        return render_script(build_grant_statements(objects, rows, self._catalog()))

    async def apply_grants(
        self,
        config: ConnectionConfig,
        objects: list[DatabaseObject],
        rows: list[PrivilegeGrantRow],
    ) -> None:
        if self.output_path is None:
            raise ApplyError("No output file configured for the local catalog", "apply_failed")
        script = render_script(build_grant_statements(objects, rows, self._catalog()))
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.output_path.write_text(script + "\n")
        except OSError as e:
            raise ApplyError(f"Could not write {self.output_path}: {e}", "apply_failed") from e

    def _catalog(self) -> CapabilityCatalog:
        if self._capabilities is None:
            return default_capability_catalog()
        return self._capabilities

    def _read(self) -> dict:
        try:
            data = json.loads(self.catalog_path.read_text())
        except FileNotFoundError as e:
            raise CatalogLoadError(
                f"Catalog file not found: {self.catalog_path}", "catalog_not_found"
            ) from e
        except (OSError, ValueError) as e:
            raise CatalogLoadError(
                f"Could not read catalog file {self.catalog_path}: {e}", "catalog_load_failed"
            ) from e
        if not isinstance(data, dict):
            raise CatalogLoadError("Catalog file must hold a JSON object", "catalog_load_failed")
        return data
