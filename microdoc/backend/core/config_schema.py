"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema    → application.yaml
    DatabaseSchema       → database.yaml
    LoggingSchema        → logging.yaml
    FeaturesSchema       → features.yaml
    SecuritySchema       → security.yaml
    NotesSchema          → notes.yaml
    ObservabilitySchema  → observability.yaml
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# application.yaml
# =============================================================================


class ServerSchema(_StrictBase):
    host: str
    port: int


class CorsSchema(_StrictBase):
    origins: list[str]


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    environment: str
    debug: bool
    api_prefix: str
    docs_enabled: bool
    server: ServerSchema
    cors: CorsSchema


# =============================================================================
# database.yaml
# =============================================================================


class RedisSchema(_StrictBase):
    host: str
    port: int
    db: int


class DatabaseSchema(_StrictBase):
    driver: Literal["sqlite+aiosqlite", "postgresql+asyncpg"]
    host: str
    port: int
    name: str
    user: str
    pool_size: int
    max_overflow: int
    pool_timeout: int
    pool_recycle: int
    echo: bool
    create_tables_on_startup: bool
    redis: RedisSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema


# =============================================================================
# features.yaml
# =============================================================================


class FeaturesSchema(_StrictBase):
    rate_limit_enabled: bool
    api_detailed_errors: bool
    api_request_logging: bool
    security_headers_enabled: bool


# =============================================================================
# security.yaml
# =============================================================================


class PasswordHashingSchema(_StrictBase):
    bcrypt_rounds: int = Field(ge=4, le=31)


class RateLimitQuotaSchema(_StrictBase):
    requests: int = Field(ge=1)
    window_seconds: int = Field(ge=1)


class RateLimitingSchema(_StrictBase):
    backend: Literal["memory", "redis"]
    trust_forwarded_for: bool = False
    create: RateLimitQuotaSchema
    access: RateLimitQuotaSchema


class RequestLimitsSchema(_StrictBase):
    max_body_size_bytes: int


class SecurityHeadersSchema(_StrictBase):
    x_content_type_options: str
    x_frame_options: str
    referrer_policy: str


class SecuritySchema(_StrictBase):
    password_hashing: PasswordHashingSchema
    rate_limiting: RateLimitingSchema
    request_limits: RequestLimitsSchema
    headers: SecurityHeadersSchema


# =============================================================================
# notes.yaml
# =============================================================================


class SlugSchema(_StrictBase):
    max_length: int = Field(ge=1)
    random_length: int = Field(ge=4)
    suffix_length: int = Field(ge=1)
    max_attempts: int = Field(ge=1)
    fallback_max_attempts: int | None = Field(default=None, ge=1)


class NoteLimitsSchema(_StrictBase):
    title_max_length: int
    content_max_length: int


class ContentPolicySchema(_StrictBase):
    enabled: bool
    extra_words: list[str]


class DiffSchema(_StrictBase):
    default_granularity: Literal["char", "word"]
    max_chars: int = Field(ge=1)
    timeout_seconds: float = Field(gt=0)


class NotesSchema(_StrictBase):
    slugs: SlugSchema
    limits: NoteLimitsSchema
    content_policy: ContentPolicySchema
    diff: DiffSchema


# =============================================================================
# observability.yaml
# =============================================================================


class HealthChecksSchema(_StrictBase):
    ready_timeout_seconds: int


class ObservabilitySchema(_StrictBase):
    health_checks: HealthChecksSchema
