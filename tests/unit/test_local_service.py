"""Unit tests for the local (catalog file) grant service."""

import asyncio
import json

import pytest

from grantwizard.config import ConnectionConfig
from grantwizard.domain.errors import ApplyError, CatalogLoadError
from grantwizard.models import ObjectClass, PrivilegeGrantRow
from grantwizard.privileges import TABLE_PRIVILEGES
from grantwizard.services.local import LocalGrantService

CONFIG = ConnectionConfig(server_id="local", database_id="local")


def test_loads_catalog_sections(catalog_file) -> None:
    service = LocalGrantService(catalog_file)
    capabilities = asyncio.run(service.load_capability_catalog(CONFIG))
    objects = asyncio.run(service.load_object_catalog(CONFIG))
    assert capabilities[ObjectClass.SEQUENCE] == ["USAGE", "SELECT"]
    assert [obj.display_name for obj in objects] == [
        "orders",
        "Totals",
        "orders_id_seq",
        "calc(integer, text)",
    ]


def test_default_capabilities_without_acl_section(tmp_path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"objects": []}))
    capabilities = asyncio.run(LocalGrantService(path).load_capability_catalog(CONFIG))
    assert capabilities[ObjectClass.TABLE] == TABLE_PRIVILEGES


def test_missing_file_is_a_load_error(tmp_path) -> None:
    service = LocalGrantService(tmp_path / "absent.json")
    with pytest.raises(CatalogLoadError) as excinfo:
        asyncio.run(service.load_object_catalog(CONFIG))
    assert excinfo.value.code == "catalog_not_found"


def test_malformed_file_is_a_load_error(tmp_path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text("{not json")
    with pytest.raises(CatalogLoadError):
        asyncio.run(LocalGrantService(path).load_capability_catalog(CONFIG))


def test_non_string_acl_code_is_a_load_error(tmp_path) -> None:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"acl": {"table": {"acl": ["r", 7]}}, "objects": []}))
    with pytest.raises(CatalogLoadError) as excinfo:
        asyncio.run(LocalGrantService(path).load_capability_catalog(CONFIG))
    assert excinfo.value.code == "catalog_load_failed"


def test_preview_and_apply_render_the_same_script(catalog_file, tmp_path) -> None:
    output = tmp_path / "out" / "grants.sql"
    service = LocalGrantService(catalog_file, output_path=output)

    async def scenario():
        await service.load_capability_catalog(CONFIG)
        objects = await service.load_object_catalog(CONFIG)
        rows = [PrivilegeGrantRow(grantee="reporting", privileges=["SELECT"])]
        preview = await service.preview_statements(CONFIG, objects[:2], rows)
        await service.apply_grants(CONFIG, objects[:2], rows)
        return preview

    preview = asyncio.run(scenario())
    assert preview == (
        "GRANT SELECT ON TABLE public.orders TO reporting;\n"
        'GRANT SELECT ON TABLE sales."Totals" TO reporting;'
    )
    assert output.read_text() == preview + "\n"


def test_apply_without_output_path_fails(catalog_file) -> None:
    service = LocalGrantService(catalog_file)
    with pytest.raises(ApplyError):
        asyncio.run(service.apply_grants(CONFIG, [], []))
