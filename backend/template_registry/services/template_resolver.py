"""
Template publish resolution.

Decides what a publish request does to the registry, given the caller's
pipeline and the two registry lookups for the request:

- no template with this name         -> CreateTemplate (establishes ownership)
- name owned by another scm_uri      -> RejectUnauthorized
- owned, version never published     -> CreateVersion
- owned, version already published   -> MergeLabels

The ownership check always runs before any version-level check. Nothing
here performs I/O; applying the outcome belongs to the caller.
"""
from dataclasses import dataclass
from typing import Optional, Union

from template_registry.core.exceptions import ResolutionInvariantError
from template_registry.schemas.templates import (
    Pipeline,
    PublishRequest,
    Template,
    TemplateConfig,
)


@dataclass(frozen=True)
class CreateTemplate:
    config: TemplateConfig


@dataclass(frozen=True)
class CreateVersion:
    config: TemplateConfig


@dataclass(frozen=True)
class RejectUnauthorized:
    name: str
    owner_scm_uri: str
    caller_scm_uri: str


@dataclass(frozen=True)
class MergeLabels:
    template_id: int
    labels: tuple[str, ...]
    added: tuple[str, ...]

    @property
    def changed(self) -> bool:
        return bool(self.added)


Outcome = Union[CreateTemplate, CreateVersion, RejectUnauthorized, MergeLabels]


def build_template_config(request: PublishRequest, scm_uri: str) -> TemplateConfig:
    """Every stored field comes from the request except scm_uri, which is the owner's."""
    return TemplateConfig(
        name=request.name,
        version=request.version,
        scm_uri=scm_uri,
        maintainer=request.maintainer,
        description=request.description,
        template_url=request.template_url,
        labels=tuple(request.labels),
        config=dict(request.config),
    )


def merge_labels(existing: frozenset[str], submitted: list[str]) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return (union, newly added), both sorted."""
    union = existing.union(submitted)
    return tuple(sorted(union)), tuple(sorted(union - existing))


def resolve(
    request: PublishRequest,
    pipeline: Pipeline,
    existing_by_name: Optional[Template],
    existing_exact: Optional[Template],
) -> Outcome:
    """Resolve a publish request against the current registry state."""
    if existing_by_name is None:
        if existing_exact is not None:
            raise ResolutionInvariantError(
                f"exact version {existing_exact.name}@{existing_exact.version} "
                f"found but no template named {request.name}"
            )
        return CreateTemplate(build_template_config(request, pipeline.scm_uri))

    if existing_by_name.scm_uri != pipeline.scm_uri:
        return RejectUnauthorized(
            name=request.name,
            owner_scm_uri=existing_by_name.scm_uri,
            caller_scm_uri=pipeline.scm_uri,
        )

    if existing_exact is None:
        return CreateVersion(build_template_config(request, existing_by_name.scm_uri))

    if (existing_exact.name, existing_exact.version) != (request.name, request.version):
        raise ResolutionInvariantError(
            f"exact lookup for {request.name}@{request.version} returned "
            f"{existing_exact.name}@{existing_exact.version}"
        )
    if existing_exact.scm_uri != existing_by_name.scm_uri:
        # scm_uri is fixed per family at first publish
        raise ResolutionInvariantError(
            f"template {request.name} has versions owned by "
            f"{existing_by_name.scm_uri} and {existing_exact.scm_uri}"
        )

    labels, added = merge_labels(existing_exact.labels, request.labels)
    return MergeLabels(template_id=existing_exact.id, labels=labels, added=added)
