"""Configuration settings for the insights trend engine."""
import os
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Insights engine configuration."""

    # Reporting
    REPORT_TIMEZONE: str = os.getenv("REPORT_TIMEZONE", "UTC")
    MONTH_MAX_DAYS: int = 31  # Upper bound for day buckets in month mode

    # Benchmarks
    BENCHMARK_MIN_SAMPLES: int = int(os.getenv("BENCHMARK_MIN_SAMPLES", "10"))
    BENCHMARK_MIN_ELAPSED_DAYS: float = 7.0  # Floor for the history span
    WEEK_UNIT_DAYS: float = 7.0
    MONTH_UNIT_DAYS: float = 30.0

    # Heatmap
    HEATMAP_TOP_SLOTS: int = 3

    # Sample fetching
    FETCH_CHUNK_SIZE: int = int(os.getenv("FETCH_CHUNK_SIZE", "50"))

    # DynamoDB (snapshot source)
    DYNAMODB_ENDPOINT: str = os.getenv("DYNAMODB_ENDPOINT", "http://dynamodb-local:8000")
    DYNAMODB_REGION: str = os.getenv("AWS_REGION", "us-east-1")
    DYNAMODB_ACCESS_KEY: str = os.getenv("AWS_ACCESS_KEY_ID", "dummy")
    DYNAMODB_SECRET_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "dummy")
    SNAPSHOT_TABLE_NAME: str = os.getenv("SNAPSHOT_TABLE_NAME", "post_metric_snapshots")

    # Service / logging
    SERVICE_NAME: str = "insights-core"
    LOGGING_HOST: str = os.getenv("LOGGING_HOST", "")
    LOGGING_PORT: int = int(os.getenv("LOGGING_PORT", "9999"))
    APP_LOG_LEVEL: str = "INFO"

    # Third-party loggers to silence (set to WARNING level)
    NOISY_LOGGERS: str = "botocore,boto3,aioboto3,aiobotocore,urllib3,asyncio"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
