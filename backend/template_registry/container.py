"""
Lazy DI container — singleton access to the Supabase client, stores, and services.

Nothing connects at import time; the first getter call builds the chain.
"""

from functools import lru_cache

from template_registry.core.config import settings
from template_registry.clients.supabase_client import SupabaseClient
from template_registry.db.template_store import TemplateStore
from template_registry.db.pipeline_store import PipelineStore
from template_registry.services.template_service import TemplateService


# -- Clients ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_supabase_client():
    return SupabaseClient(settings)


# -- DB Stores -------------------------------------------------------------

@lru_cache(maxsize=1)
def get_template_store():
    return TemplateStore(get_supabase_client(), settings)


@lru_cache(maxsize=1)
def get_pipeline_store():
    return PipelineStore(get_supabase_client(), settings)


# -- Services --------------------------------------------------------------

@lru_cache(maxsize=1)
def get_template_service():
    return TemplateService(
        template_store=get_template_store(),
        pipeline_store=get_pipeline_store(),
    )
