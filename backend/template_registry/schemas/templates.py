"""
Template schemas — publish payload, registry records, and API responses.

Wire models use camelCase aliases (templateUrl, scmUri); registry rows are
snake_case columns. Records are frozen once constructed.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from template_registry.core.constants.templates import (
    MAX_LABEL_LENGTH,
    MAX_LABELS,
    NAME_PATTERN,
    VERSION_PATTERN,
)


def dedupe_labels(labels: List[str]) -> List[str]:
    """Drop repeated labels, keeping the first occurrence of each."""
    seen: set[str] = set()
    ordered: List[str] = []
    for label in labels:
        if label not in seen:
            seen.add(label)
            ordered.append(label)
    return ordered


class PublishRequest(BaseModel):
    """Incoming publish payload for POST /templates."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=128, pattern=NAME_PATTERN)
    version: str = Field(..., pattern=VERSION_PATTERN)
    maintainer: str = ""
    description: str = ""
    template_url: str = Field("", alias="templateUrl")
    labels: List[str] = Field(default_factory=list)
    config: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("labels")
    @classmethod
    def _normalize_labels(cls, value: List[str]) -> List[str]:
        labels = dedupe_labels([label.strip() for label in value])
        if any(not label for label in labels):
            raise ValueError("labels must be non-empty strings")
        if any(len(label) > MAX_LABEL_LENGTH for label in labels):
            raise ValueError(f"labels must be at most {MAX_LABEL_LENGTH} characters")
        if len(labels) > MAX_LABELS:
            raise ValueError(f"at most {MAX_LABELS} labels are allowed")
        return labels


class Pipeline(BaseModel):
    """Source-control backed pipeline that owns template families."""

    model_config = ConfigDict(frozen=True)

    id: int
    scm_uri: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Pipeline":
        return cls(id=row["id"], scm_uri=row["scm_uri"])


class TemplateConfig(BaseModel):
    """Fields written to the registry when a template row is created."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    scm_uri: str
    maintainer: str
    description: str
    template_url: str
    labels: tuple[str, ...]
    config: Dict[str, Any]

    def to_row(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "scm_uri": self.scm_uri,
            "maintainer": self.maintainer,
            "description": self.description,
            "template_url": self.template_url,
            "labels": list(self.labels),
            "config": self.config,
        }


class Template(BaseModel):
    """One published (name, version) row in the registry."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    version: str
    scm_uri: str
    maintainer: str = ""
    description: str = ""
    template_url: str = ""
    labels: frozenset[str] = frozenset()
    config: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Template":
        return cls(
            id=row["id"],
            name=row["name"],
            version=row["version"],
            scm_uri=row["scm_uri"],
            maintainer=row.get("maintainer") or "",
            description=row.get("description") or "",
            template_url=row.get("template_url") or "",
            labels=frozenset(row.get("labels") or []),
            config=row.get("config") or {},
            created_at=row.get("created_at"),
        )

    def to_response(self) -> "TemplateResponse":
        return TemplateResponse(
            id=self.id,
            name=self.name,
            version=self.version,
            scmUri=self.scm_uri,
            maintainer=self.maintainer,
            description=self.description,
            templateUrl=self.template_url,
            labels=sorted(self.labels),
            config=self.config,
            createdAt=self.created_at,
        )


class TemplateResponse(BaseModel):
    id: int
    name: str
    version: str
    scmUri: str
    maintainer: str = ""
    description: str = ""
    templateUrl: str = ""
    labels: List[str] = []
    config: Dict[str, Any] = {}
    createdAt: Optional[str] = None
