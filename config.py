"""
Configuration management for the BillaBot team analytics service
"""
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class _EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


class AtlassianSettings(_EnvSettings):
    """Atlassian API configuration"""
    jira_url: str = Field(default="", validation_alias="JIRA_URL")
    jira_username: str = Field(default="", validation_alias="JIRA_USERNAME")
    jira_api_token: str = Field(default="", validation_alias="JIRA_API_TOKEN")

    tempo_api_token: str = Field(default="", validation_alias="TEMPO_API_TOKEN")
    tempo_base_url: str = Field(default="https://api.tempo.io/4", validation_alias="TEMPO_BASE_URL")

    @property
    def jira_configured(self) -> bool:
        return bool(self.jira_url and self.jira_username and self.jira_api_token)

    @property
    def tempo_configured(self) -> bool:
        return bool(self.tempo_api_token)


class AnalysisSettings(_EnvSettings):
    """Team analysis configuration"""
    default_days: int = Field(default=7, validation_alias="DEFAULT_ANALYSIS_DAYS")
    max_days: int = Field(default=365, validation_alias="MAX_ANALYSIS_DAYS")

    # Single-call page size; results beyond it are not fetched
    tempo_page_limit: int = Field(default=1000, validation_alias="TEMPO_PAGE_LIMIT")
    jira_user_lookup_concurrency: int = Field(default=10, validation_alias="JIRA_USER_LOOKUP_CONCURRENCY")
    http_timeout_seconds: float = Field(default=30.0, validation_alias="HTTP_TIMEOUT_SECONDS")


class AppSettings(_EnvSettings):
    """Main application settings"""
    app_name: str = Field(default="BillaBot API", validation_alias="APP_NAME")
    debug: bool = Field(default=False, validation_alias="DEBUG")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3001, validation_alias="PORT")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        validation_alias="CORS_ORIGINS",
    )


class Settings(BaseSettings):
    """Combined settings"""
    atlassian: AtlassianSettings = AtlassianSettings()
    analysis: AnalysisSettings = AnalysisSettings()
    app: AppSettings = AppSettings()


# Global settings instance
settings = Settings()
