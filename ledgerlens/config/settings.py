from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "ledgerlens"
    db_username: str = "ledgerlens"
    db_password: str = "secret"

    files_root: str = "uploads"
    owner_tag: str = "System"

    max_upload_size_bytes: int = 52_428_800
    allowed_extensions: list[str] = [".xlsx", ".xls", ".csv", ".pdf"]
    csv_delimiter: str = ","
    header_scan_rows: int = 10

    pdf_engine: str = "pdfplumber"
    pdf_render_width: int = 1920
    pdf_render_height: int = 1080
    vision_fallback_min_records: int = 3

    vision_provider: str = "ollama"
    vision_model_name: str = "llama3.2-vision"
    vision_api_key: str = ""
    vision_base_url: str = ""
    vision_timeout_seconds: int = 120

    anomaly_std_threshold: float = 3.0
    anomaly_medium_std: float = 4.0
    anomaly_high_std: float = 5.0
    trend_stable_percent: float = 5.0
    significant_change_percent: float = 10.0
    volatility_percent: float = 20.0
    forecast_min_points: int = 3


@dataclass(frozen=True)
class IngestionConfig:
    """Limits and thresholds used by the ingestion pipeline."""

    max_upload_size_bytes: int = 52_428_800
    allowed_extensions: tuple[str, ...] = (".xlsx", ".xls", ".csv", ".pdf")
    csv_delimiter: str = ","
    header_scan_rows: int = 10
    render_width: int = 1920
    render_height: int = 1080
    vision_fallback_min_records: int = 3
    vision_timeout_seconds: int = 120
    owner_tag: str = "System"

    @classmethod
    def from_settings(cls, settings: Settings) -> "IngestionConfig":
        return cls(
            max_upload_size_bytes=settings.max_upload_size_bytes,
            allowed_extensions=tuple(ext.lower() for ext in settings.allowed_extensions),
            csv_delimiter=settings.csv_delimiter,
            header_scan_rows=settings.header_scan_rows,
            render_width=settings.pdf_render_width,
            render_height=settings.pdf_render_height,
            vision_fallback_min_records=settings.vision_fallback_min_records,
            vision_timeout_seconds=settings.vision_timeout_seconds,
            owner_tag=settings.owner_tag,
        )


@dataclass(frozen=True)
class AnalyticsConfig:
    """Statistical thresholds used by the analytics engine."""

    anomaly_std_threshold: float = 3.0
    anomaly_medium_std: float = 4.0
    anomaly_high_std: float = 5.0
    trend_stable_percent: float = 5.0
    significant_change_percent: float = 10.0
    volatility_percent: float = 20.0
    forecast_min_points: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyticsConfig":
        return cls(
            anomaly_std_threshold=settings.anomaly_std_threshold,
            anomaly_medium_std=settings.anomaly_medium_std,
            anomaly_high_std=settings.anomaly_high_std,
            trend_stable_percent=settings.trend_stable_percent,
            significant_change_percent=settings.significant_change_percent,
            volatility_percent=settings.volatility_percent,
            forecast_min_points=settings.forecast_min_points,
        )
