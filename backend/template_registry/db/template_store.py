"""
Template store — the registry adapter for published templates.

Two tables back the registry:
- templates:       one row per (name, version), unique on (name, version)
- template_names:  one row per family, primary key name, holding the owning scm_uri

create() claims the family name before inserting the version row, so two
concurrent first publishes of a name cannot both succeed. Losing either
race raises TemplateConflictError.

Label merges go through the merge_template_labels database function:
    update templates
       set labels = array(select distinct unnest(labels || added) order by 1)
     where id = template_id
    returning *;
"""

import logging
from typing import Iterable, List, Optional

from fastapi import HTTPException
from postgrest.exceptions import APIError

from template_registry.core.constants.templates import SORT_DESCENDING
from template_registry.core.exceptions import TemplateConflictError, TemplateNotFoundError
from template_registry.db.base_store import BaseStore, is_unique_violation
from template_registry.schemas.templates import Template, TemplateConfig

logger = logging.getLogger("template_store")


class TemplateStore(BaseStore):
    """Registry operations over the templates and template_names tables."""

    @property
    def _table(self) -> str:
        return self._settings.templates_table

    @property
    def _names_table(self) -> str:
        return self._settings.template_names_table

    async def find_by_name(self, name: str) -> Optional[Template]:
        """First published row of the family, or None if the name is unknown."""
        rows = await self._select(
            self._table, filters={"name": name}, order_by="id", limit=1
        )
        return Template.from_row(rows[0]) if rows else None

    async def find_exact(self, name: str, version: str) -> Optional[Template]:
        rows = await self._select(
            self._table, filters={"name": name, "version": version}, limit=1
        )
        return Template.from_row(rows[0]) if rows else None

    async def get(self, template_id: int) -> Optional[Template]:
        rows = await self._select(self._table, filters={"id": template_id}, limit=1)
        return Template.from_row(rows[0]) if rows else None

    async def list_templates(
        self, page: int = 1, count: int = 50, sort: str = SORT_DESCENDING
    ) -> List[Template]:
        rows = await self._select(
            self._table,
            order_by="id",
            descending=sort == SORT_DESCENDING,
            offset=(page - 1) * count,
            limit=count,
        )
        return [Template.from_row(row) for row in rows]

    async def create(self, config: TemplateConfig) -> Template:
        """Persist a new version row, claiming the family name if it is new."""
        await self._claim_name(config.name, config.scm_uri)
        try:
            rows = await self._insert(self._table, [config.to_row()])
        except APIError as e:
            logger.warning(
                "template version conflict name=%s version=%s", config.name, config.version
            )
            raise TemplateConflictError(config.name, config.version) from e
        if not rows:
            raise HTTPException(
                status_code=500,
                detail=f"Supabase insert into {self._table} returned no row",
            )
        template = Template.from_row(rows[0])
        logger.info(
            "template created id=%s name=%s version=%s", template.id, template.name, template.version
        )
        return template

    async def update_labels(self, template_id: int, labels: Iterable[str]) -> Template:
        """
        Add labels to a template row and return the merged row.

        Only the added labels are sent; the database function unions them into
        the stored array in a single statement.
        """
        rows = await self._rpc(
            self._settings.merge_labels_function,
            {"template_id": template_id, "added": sorted(set(labels))},
        )
        if not rows:
            raise TemplateNotFoundError(template_id)
        logger.info("template labels updated id=%s labels=%s", template_id, rows[0].get("labels"))
        return Template.from_row(rows[0])

    async def _claim_name(self, name: str, scm_uri: str) -> None:
        rows = await self._select(self._names_table, filters={"name": name}, limit=1)
        if rows:
            owner = rows[0]["scm_uri"]
            if owner != scm_uri:
                raise TemplateConflictError(name, reason=f"owned by {owner}")
            return
        try:
            await self._insert(self._names_table, [{"name": name, "scm_uri": scm_uri}])
        except APIError as e:
            logger.warning("template name claimed concurrently name=%s", name)
            raise TemplateConflictError(name, reason="claimed concurrently") from e
