from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from provenance_guard.context_models import parse_mode, parse_stage

load_dotenv()

DEFAULT_VIOLATION_MESSAGE = (
    "You can only create a sales order through the quote to sales order process. "
    "Please create a quote and then convert it to a sales order"
)


class Settings(BaseSettings):
    PROVENANCE_MAX_ANCESTRY_DEPTH: int = Field(64, ge=1)
    PROVENANCE_AUDIT_LOG_FILE: str = Field("")
    PROVENANCE_LOG_LEVEL: str = Field("INFO")
    PROVENANCE_LOG_DIR: str = Field("logs")
    PROVENANCE_METRICS_PORT: int = Field(0)
    # Rule guarded by default (sales orders only through quote conversion)
    PROVENANCE_RULE_NAME: str = Field("ValidateOrderCreatedFromQuote")
    PROVENANCE_ENTITY: str = Field("salesorder")
    PROVENANCE_OPERATION: str = Field("create")
    # Comma separated operation names
    PROVENANCE_APPROVED_ORIGINS: str = Field("convertquotetosalesorder")
    PROVENANCE_REQUIRED_MODE: str = Field("synchronous")
    PROVENANCE_RECOMMENDED_STAGE: str = Field("pre_operation")
    PROVENANCE_VIOLATION_MESSAGE: str = Field(DEFAULT_VIOLATION_MESSAGE)

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @field_validator("PROVENANCE_REQUIRED_MODE")
    @classmethod
    def validate_mode(cls, v):
        parse_mode(v)
        return v

    @field_validator("PROVENANCE_RECOMMENDED_STAGE")
    @classmethod
    def validate_stage(cls, v):
        parse_stage(v)
        return v

    @field_validator("PROVENANCE_APPROVED_ORIGINS")
    @classmethod
    def validate_origins(cls, v):
        if not [name for name in v.split(",") if name.strip()]:
            raise ValueError("at least one approved origin is required")
        return v

    @property
    def approved_origins(self) -> List[str]:
        return [name.strip() for name in self.PROVENANCE_APPROVED_ORIGINS.split(",") if name.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
