"""
PostgreSQL privilege constants per object class.

Used as the capability catalog when none is supplied by the server, and for
translating single-letter ACL codes.
Reference: https://www.postgresql.org/docs/current/ddl-priv.html
"""

from grantwizard.models import CapabilityCatalog, ObjectClass

# Tables, views and materialized views
TABLE_PRIVILEGES = [
    "INSERT",
    "SELECT",
    "UPDATE",
    "DELETE",
    "TRUNCATE",
    "REFERENCES",
    "TRIGGER",
]

SEQUENCE_PRIVILEGES = [
    "USAGE",
    "SELECT",
    "UPDATE",
]

FUNCTION_PRIVILEGES = [
    "EXECUTE",
]

PROCEDURE_PRIVILEGES = [
    "EXECUTE",
]

FOREIGN_TABLE_PRIVILEGES = [
    "INSERT",
    "SELECT",
    "UPDATE",
    "REFERENCES",
]

# EDB Postgres Advanced Server packages
PACKAGE_PRIVILEGES = [
    "EXECUTE",
]

# ACL letter -> privilege keyword, as stored in aclitem
ACL_CODES = {
    "a": "INSERT",
    "r": "SELECT",
    "w": "UPDATE",
    "d": "DELETE",
    "D": "TRUNCATE",
    "x": "REFERENCES",
    "t": "TRIGGER",
    "U": "USAGE",
    "X": "EXECUTE",
    "C": "CREATE",
    "c": "CONNECT",
    "T": "TEMPORARY",
}

ACL_LETTERS = {keyword: letter for letter, keyword in ACL_CODES.items()}


def default_capability_catalog() -> CapabilityCatalog:
    """Return a fresh copy of the built-in capability catalog"""
    return {
        ObjectClass.TABLE: list(TABLE_PRIVILEGES),
        ObjectClass.SEQUENCE: list(SEQUENCE_PRIVILEGES),
        ObjectClass.FUNCTION: list(FUNCTION_PRIVILEGES),
        ObjectClass.PROCEDURE: list(PROCEDURE_PRIVILEGES),
        ObjectClass.FOREIGN_TABLE: list(FOREIGN_TABLE_PRIVILEGES),
        ObjectClass.PACKAGE: list(PACKAGE_PRIVILEGES),
    }


def privilege_from_code(code: str) -> str:
    """Translate an ACL letter to its keyword; keywords pass through upper-cased"""
    if code in ACL_CODES:
        return ACL_CODES[code]
    return code.strip().upper()


def privilege_to_code(privilege: str) -> str:
    """Translate a privilege keyword to its ACL letter (unknown keywords pass through)"""
    return ACL_LETTERS.get(privilege.upper(), privilege)
