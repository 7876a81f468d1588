"""
PostgreSQL GRANT/REVOKE statement builder.

Renders the statements the wizard would run for a selection and a set of
grantee rows. Privileges are filtered per object against the capability
catalog, so a row mixing table and function privileges only contributes the
applicable ones to each object.
"""

import re
from typing import List, Mapping, Sequence

from grantwizard.models import DatabaseObject, ObjectClass, ObjectType, PrivilegeGrantRow

_SIMPLE_IDENT = re.compile(r"^[a-z_][a-z0-9_$]*$")

# Reserved key words that must be quoted even when lower-case
RESERVED_WORDS = frozenset(
    {
        "all", "analyse", "analyze", "and", "any", "array", "as", "asc", "asymmetric",
        "both", "case", "cast", "check", "collate", "column", "constraint", "create",
        "current_catalog", "current_date", "current_role", "current_time",
        "current_timestamp", "current_user", "default", "deferrable", "desc",
        "distinct", "do", "else", "end", "except", "false", "fetch", "for", "foreign",
        "from", "grant", "group", "having", "in", "initially", "intersect", "into",
        "lateral", "leading", "limit", "localtime", "localtimestamp", "not", "null",
        "offset", "on", "only", "or", "order", "placing", "primary", "references",
        "returning", "select", "session_user", "some", "symmetric", "table", "then",
        "to", "trailing", "true", "union", "unique", "user", "using", "variadic",
        "when", "where", "window", "with",
    }
)

_KEYWORD_BY_TYPE = {
    ObjectType.TABLE: "TABLE",
    ObjectType.VIEW: "TABLE",
    ObjectType.MATERIALIZED_VIEW: "TABLE",
    ObjectType.FOREIGN_TABLE: "TABLE",
    ObjectType.SEQUENCE: "SEQUENCE",
    ObjectType.FUNCTION: "FUNCTION",
    ObjectType.TRIGGER_FUNCTION: "FUNCTION",
    ObjectType.PROCEDURE: "PROCEDURE",
    ObjectType.PACKAGE: "PACKAGE",
}


def quote_ident(identifier: str) -> str:
    """Quote an identifier only when PostgreSQL requires it"""
    if _SIMPLE_IDENT.match(identifier) and identifier not in RESERVED_WORDS:
        return identifier
    return '"' + identifier.replace('"', '""') + '"'


def format_grantee(grantee: str) -> str:
    name = grantee.strip()
    if name.upper() == "PUBLIC":
        return "PUBLIC"
    return quote_ident(name)


def format_object(obj: DatabaseObject) -> str:
    """Render `KIND schema.name[(args)]` for an object"""
    if obj.object_type is None or obj.object_type not in _KEYWORD_BY_TYPE:
        raise ValueError(f"Cannot grant on object '{obj.name}' of unknown type")
    keyword = _KEYWORD_BY_TYPE[obj.object_type]
    ref = f"{quote_ident(obj.schema_name)}.{quote_ident(obj.name)}"
    if keyword in ("FUNCTION", "PROCEDURE"):
        ref += f"({obj.arg_signature or ''})"
    return f"{keyword} {ref}"


def _row_statements(target: str, row: PrivilegeGrantRow, privileges: List[str]) -> List[str]:
    grantee = format_grantee(row.grantee or "")
    plain = [p for p in privileges if not row.has_grant_option(p)]
    optioned = [p for p in privileges if row.has_grant_option(p)]

    statements = []
    if row.revoke:
        if plain:
            statements.append(f"REVOKE {', '.join(plain)} ON {target} FROM {grantee};")
        if optioned:
            statements.append(
                f"REVOKE GRANT OPTION FOR {', '.join(optioned)} ON {target} FROM {grantee};"
            )
    else:
        if plain:
            statements.append(f"GRANT {', '.join(plain)} ON {target} TO {grantee};")
        if optioned:
            statements.append(
                f"GRANT {', '.join(optioned)} ON {target} TO {grantee} WITH GRANT OPTION;"
            )
    return statements


def build_grant_statements(
    objects: Sequence[DatabaseObject],
    rows: Sequence[PrivilegeGrantRow],
    catalog: Mapping[ObjectClass, Sequence[str]],
) -> List[str]:
    """Build GRANT/REVOKE statements for every object and every valid row

    Args:
        objects: Selected objects, in selection order
        rows: Grantee rows; invalid rows are skipped
        catalog: Object class -> grantable privileges

    Returns:
        Statements in object order, then row order
    """
    statements: List[str] = []
    for obj in objects:
        allowed = catalog.get(obj.object_class, ())
        if not allowed:
            continue
        target = format_object(obj)
        for row in rows:
            if not row.is_valid:
                continue
            privileges = [p for p in row.privileges if p in allowed]
            if privileges:
                statements.extend(_row_statements(target, row, privileges))
    return statements


def render_script(statements: Sequence[str]) -> str:
    return "\n".join(statements)
