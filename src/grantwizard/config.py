"""
Connection configuration for the grant wizard.
"""

from pydantic import BaseModel, Field, field_validator


class ConnectionConfig(BaseModel):
    """Where the wizard runs and which browser node it was opened on

    Attributes:
        base_url: Root URL of the grant service (HTTP source only)
        server_id: Server identifier
        database_id: Database identifier
        node_id: Browser node the wizard was opened on
        node_type: Browser node type (collection prefixes are stripped)
        timeout_seconds: Transport timeout per request
        verify_tls: Verify TLS certificates
    """

    base_url: str = Field(default="http://127.0.0.1:5050", description="Grant service URL")
    server_id: str = Field(..., description="Server ID")
    database_id: str = Field(..., description="Database ID")
    node_id: str = Field(default="", description="Browser node ID")
    node_type: str = Field(default="database", description="Browser node type")
    timeout_seconds: float = Field(default=30.0, description="Request timeout in seconds")
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("node_type")
    @classmethod
    def _normalize_node_type(cls, value: str) -> str:
        return value.replace("coll-", "").replace("materialized_", "")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
