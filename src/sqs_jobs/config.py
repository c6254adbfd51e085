"""Environment-driven settings for the SQS transport and consumer."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SQSJobsSettings(BaseSettings):
    """Settings read from ``SQS_JOBS_*`` environment variables (or a .env file)."""

    model_config = SettingsConfigDict(
        env_prefix="SQS_JOBS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Client
    region_name: str = Field(default="us-east-1", description="AWS region")
    endpoint_url: str | None = Field(
        default=None, description="Custom endpoint, e.g. a local SQS emulator"
    )
    queue_name_prefix: str = Field(
        default="", description="Prepended to every queue name on lookup"
    )
    create_missing_queues: bool = Field(
        default=False, description="Create queues that do not exist on lookup"
    )

    # Messages
    default_message_group_id: str = Field(
        default="default", description="Group id for FIFO messages without one"
    )
    identity_field: str = Field(
        default="job_id",
        description="Body key excluded from the deduplication digest",
    )

    # Consumer
    wait_time_seconds: int = Field(default=20, ge=0, le=20)
    visibility_timeout: int = Field(default=30, ge=0)
    max_number_of_messages: int = Field(default=10, ge=1, le=10)
