"""Connection-name to artifact mapping table."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from network_branding.errors import MappingError


class ArtifactSet(BaseModel):
    """Background image plus an optional greeter badge."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    background: str = Field(min_length=1)
    badge: str | None = None

    @property
    def background_uri(self) -> str:
        """Background as a URI, as gsettings expects it."""
        if "://" in self.background:
            return self.background
        return f"file://{self.background}"


class MappingTable(BaseModel):
    """Immutable exact-match mapping with a fallback entry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    connections: dict[str, ArtifactSet] = Field(default_factory=dict)
    fallback: ArtifactSet

    def resolve(self, connection_name: str | None) -> ArtifactSet:
        """Return the artifacts for a connection name, or the fallback."""
        if connection_name is None:
            return self.fallback
        return self.connections.get(connection_name, self.fallback)

    def is_mapped(self, connection_name: str | None) -> bool:
        return connection_name is not None and connection_name in self.connections


def load_mapping_table(path: Path) -> MappingTable:
    """Load and validate the mapping table from a JSON file."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MappingError(f"Cannot read mapping file {path}: {exc}") from exc
    try:
        return MappingTable.model_validate_json(raw)
    except ValidationError as exc:
        raise MappingError(f"Invalid mapping file {path}: {exc}") from exc
