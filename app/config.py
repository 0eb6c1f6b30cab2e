"""Runtime configuration for the Intimex assistant service."""
from functools import lru_cache
from typing import Dict, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    app_env: str = "development"
    api_host: str = "0.0.0.0"
    api_port: int = Field(
        3000, validation_alias=AliasChoices("INTIMEX_API_PORT", "PORT")
    )
    log_level: str = "INFO"

    # Deployments set the plain OPENAI_API_KEY; the prefixed name wins when both exist.
    openai_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("INTIMEX_OPENAI_API_KEY", "OPENAI_API_KEY")
    )
    llm_base_url: str = "https://api.openai.com/v1"
    llm_timeout_seconds: float = 60.0
    llm_max_concurrency: int = 2
    llm_max_attempts: int = 3
    llm_backoff_seconds: float = 1.0

    company_csv_url: str = Field(
        "https://intimexdakmil.com/public_html/data/Thong_tin_cong_ty.csv",
        validation_alias=AliasChoices("INTIMEX_COMPANY_CSV_URL", "COMPANY_CSV_URL"),
    )
    hr_csv_url: str = Field(
        "https://intimexdakmil.com/public_html/data/Bang_nhan_su_mo_rong.csv",
        validation_alias=AliasChoices("INTIMEX_HR_CSV_URL", "HR_CSV_URL"),
    )
    dataset_timeout_seconds: float = 8.0
    dataset_ttl_seconds: float = 600.0
    dataset_retry_seconds: float = 30.0

    assistant_config_path: str = Field(
        "config/assistant.yaml",
        validation_alias=AliasChoices("INTIMEX_ASSISTANT_CONFIG_PATH", "ASSISTANT_CONFIG_PATH"),
    )
    downloads_dir: str = "public/downloads"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="INTIMEX_",
        env_ignore_empty=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def data_sources(self) -> Dict[str, str]:
        """Dataset name -> remote URL, as consumed by the dataset cache."""

        return {"company": self.company_csv_url, "personnel": self.hr_csv_url}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor used across the codebase."""

    return Settings()  # type: ignore[arg-type]


settings = get_settings()
