"""
Template service — publish orchestration over the registry.

Reads the registry, resolves the publish request, and applies the outcome.
A create that loses a uniqueness race is resolved again from fresh reads,
at most PUBLISH_CONFLICT_RETRIES times; after that the conflict propagates.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from template_registry.core.constants.templates import (
    PUBLISH_CONFLICT_RETRIES,
    SORT_DESCENDING,
)
from template_registry.core.exceptions import (
    PipelineNotFoundError,
    TemplateConflictError,
    TemplateNotFoundError,
)
from template_registry.db.pipeline_store import PipelineStore
from template_registry.db.template_store import TemplateStore
from template_registry.schemas.templates import Pipeline, PublishRequest, Template
from template_registry.services.template_resolver import (
    CreateTemplate,
    CreateVersion,
    MergeLabels,
    Outcome,
    RejectUnauthorized,
    resolve,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishResult:
    """Applied outcome. template is None only when the publish was rejected."""

    outcome: Outcome
    template: Optional[Template]

    @property
    def created(self) -> bool:
        return isinstance(self.outcome, (CreateTemplate, CreateVersion))

    @property
    def rejected(self) -> bool:
        return isinstance(self.outcome, RejectUnauthorized)


class TemplateService:
    def __init__(self, template_store: TemplateStore, pipeline_store: PipelineStore) -> None:
        self.template_store = template_store
        self.pipeline_store = pipeline_store

    async def get_pipeline(self, pipeline_id: int) -> Pipeline:
        pipeline = await self.pipeline_store.get(pipeline_id)
        if pipeline is None:
            raise PipelineNotFoundError(pipeline_id)
        return pipeline

    async def get_template(self, template_id: int) -> Template:
        template = await self.template_store.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    async def list_templates(
        self, page: int = 1, count: int = 50, sort: str = SORT_DESCENDING
    ) -> List[Template]:
        return await self.template_store.list_templates(page=page, count=count, sort=sort)

    async def publish(self, request: PublishRequest, pipeline_id: int) -> PublishResult:
        """Publish a template version on behalf of the pipeline that owns the build."""
        pipeline = await self.get_pipeline(pipeline_id)

        attempt = 0
        while True:
            try:
                return await self._publish_once(request, pipeline)
            except TemplateConflictError as e:
                if attempt >= PUBLISH_CONFLICT_RETRIES:
                    logger.error(f"Publish of {request.name}@{request.version} conflicted again: {e}")
                    raise
                attempt += 1
                logger.warning(
                    f"Publish of {request.name}@{request.version} lost a create race, "
                    f"re-resolving (attempt {attempt}/{PUBLISH_CONFLICT_RETRIES})"
                )

    async def _publish_once(self, request: PublishRequest, pipeline: Pipeline) -> PublishResult:
        existing_by_name = await self.template_store.find_by_name(request.name)
        existing_exact = None
        if existing_by_name is not None and existing_by_name.scm_uri == pipeline.scm_uri:
            existing_exact = await self.template_store.find_exact(request.name, request.version)

        outcome = resolve(request, pipeline, existing_by_name, existing_exact)
        return await self._apply(outcome, existing_exact)

    async def _apply(self, outcome: Outcome, existing_exact: Optional[Template]) -> PublishResult:
        if isinstance(outcome, RejectUnauthorized):
            logger.warning(
                f"Rejected publish of {outcome.name}: owned by {outcome.owner_scm_uri}, "
                f"caller is {outcome.caller_scm_uri}"
            )
            return PublishResult(outcome=outcome, template=None)

        if isinstance(outcome, (CreateTemplate, CreateVersion)):
            template = await self.template_store.create(outcome.config)
            logger.info(
                f"{type(outcome).__name__}: {template.name}@{template.version} (id={template.id})"
            )
            return PublishResult(outcome=outcome, template=template)

        if isinstance(outcome, MergeLabels):
            if not outcome.changed:
                logger.info(f"Re-publish of template {outcome.template_id} added no labels")
                return PublishResult(outcome=outcome, template=existing_exact)
            template = await self.template_store.update_labels(outcome.template_id, outcome.added)
            logger.info(f"Merged labels {list(outcome.added)} into template {template.id}")
            return PublishResult(outcome=outcome, template=template)

        raise TypeError(f"Unhandled publish outcome: {outcome!r}")
