"""Core data models for the IBM i sandbox connector."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

# Fixed connection parameters used by every attempt this package launches.
DEFAULT_PORT = 22
DEFAULT_KEEPALIVE_INTERVAL_MS = 35_000


# ── Connection Request ───────────────────────────────────────────────────────


class ConnectionRequest(BaseModel):
    """Parameters handed to the host's direct-connect command.

    Built fresh for every attempt and discarded once the invocation returns.
    Serialised with ``by_alias=True`` to match the host command payload.
    """

    host: str
    name: str = Field(description="Display name of the connection")
    username: str
    password: str = Field(repr=False)
    port: int = DEFAULT_PORT
    private_key: str | None = Field(default=None, alias="privateKey")
    keepalive_interval: int = Field(
        default=DEFAULT_KEEPALIVE_INTERVAL_MS, alias="keepaliveInterval"
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("host", "username", "password")
    @classmethod
    def _require_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    def to_payload(self) -> dict[str, Any]:
        """Wire form for the connect command (camelCase keys)."""
        return self.model_dump(by_alias=True)


# ── Connection Configuration ────────────────────────────────────────────────


class ObjectFilter(BaseModel):
    """A filter scoping which remote objects the object browser shows."""

    name: str
    library: str
    object: str = "*"
    types: frozenset[str] = Field(default_factory=frozenset)
    member: str = "*"
    member_type: str = Field(default="", alias="memberType")

    model_config = {"populate_by_name": True, "frozen": True}


class ConnectionConfig(BaseModel):
    """Snapshot of a per-connection configuration owned by the host.

    Only the library list and object filters are interpreted here. Any other
    keys the host sends are kept as extra fields and returned unchanged.
    """

    library_list: tuple[str, ...] = Field(default=(), alias="libraryList")
    object_filters: tuple[ObjectFilter, ...] = Field(default=(), alias="objectFilters")

    model_config = {"populate_by_name": True, "frozen": True, "extra": "allow"}

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ── Credential Resolution ───────────────────────────────────────────────────


class BranchIdentity(BaseModel):
    """Host/user candidates inferred from a ``host/user`` or ``user`` branch name."""

    host: str | None = None
    username: str | None = None

    model_config = {"frozen": True}


class ResolutionInputs(BaseModel):
    """Everything the bootstrap precedence rules look at, all optional."""

    server: str | None = None
    username: str | None = None
    password: str | None = Field(default=None, repr=False)
    sandbox_mode: bool = False
    branch_name: str | None = None

    model_config = {"frozen": True}


class ResolvedIdentity(BaseModel):
    """A complete server/username/password triple ready for connection."""

    server: str
    username: str
    password: str = Field(repr=False)

    model_config = {"frozen": True}


# ── Links ────────────────────────────────────────────────────────────────────


class LinkRequest(BaseModel):
    """Fields extracted from a ``/connect`` link query."""

    server: str
    user: str
    encoded_password: str | None = Field(default=None, repr=False)

    model_config = {"frozen": True}
