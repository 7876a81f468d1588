"""
HTTP grant service.

Talks to the grant wizard REST endpoints of the management server:

    GET  /grant_wizard/acl/<sid>/<did>/
    GET  /grant_wizard/objects/<sid>/<did>/<node_id>/<node_type>/
    POST /grant_wizard/sql/<sid>/<did>/
    POST /grant_wizard/save/<sid>/<did>/
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from grantwizard.config import ConnectionConfig
from grantwizard.domain.errors import (
    ApplyError,
    CatalogLoadError,
    GrantWizardDomainError,
    PreviewError,
    ServiceUnavailableError,
)
from grantwizard.models import (
    CapabilityCatalog,
    DatabaseObject,
    ObjectClass,
    ObjectType,
    PrivilegeGrantRow,
)
from grantwizard.privileges import privilege_from_code, privilege_to_code

_OBJECT_TYPES = {member.value: member for member in ObjectType}
_OBJECT_CLASSES = {member.value: member for member in ObjectClass}


def parse_capability_catalog(payload: dict[str, Any]) -> CapabilityCatalog:
    """Parse `{class: {"acl": [codes]}}` into a capability catalog

    Unknown class names are ignored; ACL letters become keywords.
    """
    catalog: CapabilityCatalog = {}
    for class_name, entry in payload.items():
        object_class = _OBJECT_CLASSES.get(class_name)
        if object_class is None or object_class == ObjectClass.UNMAPPED:
            continue
        codes = entry.get("acl", []) if isinstance(entry, dict) else entry
        privileges: list[str] = []
        for code in codes or []:
            privilege = privilege_from_code(code)
            if privilege not in privileges:
                privileges.append(privilege)
        catalog[object_class] = privileges
    return catalog


def parse_object(row: dict[str, Any]) -> DatabaseObject:
    """Build a DatabaseObject from one object catalog row

    Unrecognised object type labels are kept as None (unmapped).
    """
    return DatabaseObject(
        id=str(row["oid"]),
        object_type=_OBJECT_TYPES.get(row.get("object_type", "")),
        schema_name=row.get("nspname", ""),
        name=row["name"],
        arg_signature=row.get("proargs"),
    )


def serialize_object(obj: DatabaseObject) -> dict[str, Any]:
    return {
        "oid": obj.id,
        "object_type": obj.object_type.value if obj.object_type else None,
        "nspname": obj.schema_name,
        "name": obj.name,
        "proargs": obj.arg_signature,
        "name_with_args": obj.display_name,
    }


def serialize_row(row: PrivilegeGrantRow) -> dict[str, Any]:
    return {
        "grantee": row.grantee,
        "privileges": [
            {
                "privilege_type": privilege_to_code(privilege),
                "privilege": True,
                "with_grant": row.has_grant_option(privilege),
            }
            for privilege in row.privileges
        ],
    }


def build_payload(objects: list[DatabaseObject], rows: list[PrivilegeGrantRow]) -> dict[str, Any]:
    """Body for the sql and save endpoints; the wire rows only describe grants"""
    return {
        "acl": [serialize_row(row) for row in rows],
        "objects": [serialize_object(obj) for obj in objects],
    }


def _error_detail(response: httpx.Response) -> str:
    """Pull the server's error text out of a failed response"""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("errormsg", "info", "message"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


class HttpGrantService:
    """GrantService backed by the grant wizard REST API

    Attributes:
        client: Optional shared httpx.AsyncClient (a short-lived client is
            opened per request otherwise)
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self.client = client

    async def load_capability_catalog(self, config: ConnectionConfig) -> CapabilityCatalog:
        url = _url(config, "acl", config.server_id, config.database_id)
        body = await self._request("GET", url, config, CatalogLoadError, "catalog_load_failed")
        if not isinstance(body, dict):
            raise CatalogLoadError("Unexpected privilege catalog response", "catalog_load_failed")
        try:
            return parse_capability_catalog(body)
        except (AttributeError, TypeError, ValueError) as e:
            raise CatalogLoadError(f"Malformed privilege catalog: {e}", "catalog_load_failed") from e

    async def load_object_catalog(self, config: ConnectionConfig) -> list[DatabaseObject]:
        url = _url(
            config, "objects", config.server_id, config.database_id, config.node_id, config.node_type
        )
        body = await self._request("GET", url, config, CatalogLoadError, "catalog_load_failed")
        rows = body.get("result") if isinstance(body, dict) else None
        if not isinstance(rows, list):
            raise CatalogLoadError("Unexpected object catalog response", "catalog_load_failed")
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
        _reject_revokes(rows, PreviewError)
        url = _url(config, "sql", config.server_id, config.database_id)
        body = await self._request(
            "POST", url, config, PreviewError, "preview_failed", json=build_payload(objects, rows)
        )
        if not isinstance(body, dict) or "data" not in body:
            raise PreviewError("Unexpected preview response", "preview_failed")
        return str(body["data"])

    async def apply_grants(
        self,
        config: ConnectionConfig,
        objects: list[DatabaseObject],
        rows: list[PrivilegeGrantRow],
    ) -> None:
        _reject_revokes(rows, ApplyError)
        url = _url(config, "save", config.server_id, config.database_id)
        body = await self._request(
            "POST", url, config, ApplyError, "apply_failed", json=build_payload(objects, rows)
        )
        if isinstance(body, dict) and body.get("success") is False:
            raise ApplyError(body.get("errormsg") or "Grant statements failed", "apply_failed")

    async def _request(
        self,
        method: str,
        url: str,
        config: ConnectionConfig,
        error_type: type[GrantWizardDomainError],
        code: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            if self.client is not None:
                response = await self.client.request(method, url, json=json)
            else:
                async with httpx.AsyncClient(
                    timeout=config.timeout_seconds, verify=config.verify_tls
                ) as client:
                    response = await client.request(method, url, json=json)
        except httpx.RequestError as e:
            raise ServiceUnavailableError(
                f"Could not reach grant service: {e}", "service_unavailable"
            ) from e

        if response.is_error:
            raise error_type(_error_detail(response), code)
        try:
            return response.json()
        except ValueError as e:
            raise error_type(f"Invalid JSON from grant service: {e}", code) from e


def _reject_revokes(rows: list[PrivilegeGrantRow], error_type: type[GrantWizardDomainError]) -> None:
    # The grant wizard endpoints only generate GRANT statements
    revoking = [row.grantee or "" for row in rows if row.revoke]
    if revoking:
        raise error_type(
            f"The grant service cannot revoke privileges (grantee: {', '.join(revoking)})",
            "revoke_unsupported",
        )


def _url(config: ConnectionConfig, endpoint: str, *parts: str) -> str:
    path = "/".join(quote(str(part), safe="") for part in parts)
    return f"{config.base_url}/grant_wizard/{endpoint}/{path}/"
