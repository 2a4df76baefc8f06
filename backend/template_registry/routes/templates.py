"""
Template routes — publish, list, and fetch templates.

Provides:
- POST /templates          – publish a template version (build token required)
- GET  /templates          – paginated template listing
- GET  /templates/{id}     – single template
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response

from template_registry.container import get_template_service
from template_registry.core.auth import get_build_credentials
from template_registry.core.config import settings
from template_registry.core.constants.templates import SORT_ASCENDING, SORT_DESCENDING
from template_registry.core.exceptions import (
    DatabaseTransientError,
    PipelineNotFoundError,
    TemplateConflictError,
    TemplateNotFoundError,
)
from template_registry.schemas.templates import PublishRequest, TemplateResponse
from template_registry.services.template_service import TemplateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])


def _get_service() -> TemplateService:
    return get_template_service()


@router.post("", response_model=TemplateResponse, status_code=201)
async def publish_template(
    request: Request,
    response: Response,
    payload: PublishRequest = Body(...),
    credentials: dict = Depends(get_build_credentials),
):
    """Publish a template version under the calling pipeline's ownership."""
    try:
        service = _get_service()
        result = await service.publish(payload, credentials["pipeline_id"])
    except PipelineNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TemplateConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except DatabaseTransientError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception(f"Publish of {payload.name}@{payload.version} failed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    if result.rejected:
        raise HTTPException(status_code=401, detail="Not allowed to publish this template")

    if result.created:
        response.headers["Location"] = str(
            request.url_for("get_template", template_id=result.template.id)
        )
        response.status_code = 201
    else:
        response.status_code = 200
    return result.template.to_response()


@router.get("", response_model=List[TemplateResponse])
async def list_templates(
    page: int = Query(1, ge=1),
    count: Optional[int] = Query(None, ge=1),
    sort: str = Query(SORT_DESCENDING, pattern=f"^({SORT_ASCENDING}|{SORT_DESCENDING})$"),
):
    """List templates, newest first by default."""
    page_size = min(count or settings.default_page_size, settings.max_page_size)
    try:
        service = _get_service()
        templates = await service.list_templates(page=page, count=page_size, sort=sort)
        return [template.to_response() for template in templates]
    except DatabaseTransientError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/{template_id}", response_model=TemplateResponse, name="get_template")
async def get_template(template_id: int):
    try:
        service = _get_service()
        template = await service.get_template(template_id)
        return template.to_response()
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Template does not exist") from exc
    except DatabaseTransientError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
