import os
from typing import Optional
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel


load_dotenv()


class Settings(BaseModel):
    # Supabase (registry persistence)
    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_service_role_key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

    # Registry tables
    templates_table: str = os.getenv("TEMPLATES_TABLE", "templates")
    template_names_table: str = os.getenv("TEMPLATE_NAMES_TABLE", "template_names")
    pipelines_table: str = os.getenv("PIPELINES_TABLE", "pipelines")
    # Database function that adds labels to one template row in a single statement
    merge_labels_function: str = os.getenv("MERGE_LABELS_FUNCTION", "merge_template_labels")

    # Build tokens are issued to running builds and carry the pipelineId claim
    build_token_secret: Optional[str] = os.getenv("BUILD_TOKEN_SECRET")
    build_token_algorithm: str = os.getenv("BUILD_TOKEN_ALGORITHM", "HS256")
    build_token_scope: str = os.getenv("BUILD_TOKEN_SCOPE", "build")

    # Listing
    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "50"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # CORS, comma separated
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")

    @property
    def cors_origins(self) -> list[str]:
        """Split the configured CORS origins into a list."""
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
