# issync Configuration Schema
# Pydantic models for YAML configuration validation

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class CollectionConfig(BaseModel):
    """A remote issue collection mirrored into a local directory."""

    owner: str = Field(description="Repository owner (user or organization)")
    repo: str = Field(description="Repository name")
    output_dir: str = Field(description="Directory the artifacts are written to")
    display_name: str | None = Field(default=None, description="Human-readable name")
    enabled: bool = Field(default=True, description="Whether this collection is synced")

    @field_validator("output_dir")
    @classmethod
    def expand_output_dir(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())

    @property
    def name(self) -> str:
        """Collection identifier used for ledger and cache scoping."""
        return f"{self.owner}-{self.repo}"

    @property
    def label(self) -> str:
        """Name to show users."""
        return self.display_name or f"{self.owner}/{self.repo}"


class OutputConfig(BaseModel):
    """Artifact layout and output settings."""

    group_by_state: bool = Field(default=True, description="File artifacts under category directories")
    auto_reorganize: bool = Field(default=True, description="Move artifacts whose category changed during sync")
    prune_deleted: bool = Field(default=True, description="Delete artifacts of items no longer fetched")
    artifact_suffix: str = Field(default=".md", description="Artifact file suffix")
    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_level: str = Field(default="WARNING", description="Logging level for the issync logger")

    @field_validator("artifact_suffix")
    @classmethod
    def dotted_suffix(cls, v: str) -> str:
        """Ensure the suffix starts with a dot."""
        return v if v.startswith(".") else f".{v}"

    @field_validator("log_level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        """Normalize level name."""
        return v.upper()


class CacheConfig(BaseModel):
    """Upstream response cache settings."""

    enabled: bool = Field(default=True, description="Use the response cache")
    directory: str = Field(default="~/.cache/issync", description="Cache root, one subdirectory per collection")
    default_ttl: int = Field(default=5 * 60 * 1000, gt=0, description="Entry lifetime in milliseconds")
    max_entries: int = Field(default=100, gt=0, description="Maximum entries per collection")

    @field_validator("directory")
    @classmethod
    def expand_directory(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())


class StateConfig(BaseModel):
    """Ledger storage settings."""

    directory: str = Field(default="~/.config/issync/state", description="Directory holding one ledger per collection")

    @field_validator("directory")
    @classmethod
    def expand_directory(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())

    def ledger_path(self, collection_name: str) -> Path:
        """Ledger document for a collection."""
        return Path(self.directory) / f"{collection_name}.json"


class IssyncConfig(BaseModel):
    """Root configuration model for issync."""

    collections: list[CollectionConfig] = Field(default_factory=list, description="Collections to mirror")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")
    cache: CacheConfig = Field(default_factory=CacheConfig, description="Cache settings")
    state: StateConfig = Field(default_factory=StateConfig, description="Ledger settings")

    def get_enabled_collections(self) -> list[CollectionConfig]:
        """Return only enabled collections."""
        return [c for c in self.collections if c.enabled]

    def get_collection(self, name: str) -> CollectionConfig | None:
        """
        Get a collection by name.

        Accepts ``owner-repo``, ``owner/repo`` or the display name.
        """
        for collection in self.collections:
            if name in (collection.name, f"{collection.owner}/{collection.repo}", collection.display_name):
                return collection
        return None
