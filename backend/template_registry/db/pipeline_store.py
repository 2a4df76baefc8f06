"""
Pipeline store — read-only lookup of the pipelines that own templates.
"""

import logging
from typing import Optional

from template_registry.db.base_store import BaseStore
from template_registry.schemas.templates import Pipeline

logger = logging.getLogger("pipeline_store")


class PipelineStore(BaseStore):

    async def get(self, pipeline_id: int) -> Optional[Pipeline]:
        rows = await self._select(
            self._settings.pipelines_table,
            columns="id,scm_uri",
            filters={"id": pipeline_id},
            limit=1,
        )
        if not rows:
            logger.info("pipeline not found id=%s", pipeline_id)
            return None
        return Pipeline.from_row(rows[0])
