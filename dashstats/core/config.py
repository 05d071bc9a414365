from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dashstats.utils.exceptions import ConfigurationException

DEFAULT_POSTHOG_API_HOST = "https://app.posthog.com"
DEFAULT_ANALYTICS_PATH = "/analytics/data"


class Settings(BaseSettings):
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	APP_NAME: str = Field(default="Dashstats API")
	DEBUG: bool = Field(default=False)
	API_PREFIX: str = Field(default="")

	# Analytics endpoint
	ANALYTICS_ENABLED: bool = Field(default=True)
	ANALYTICS_PATH: str = Field(default=DEFAULT_ANALYTICS_PATH)
	# Upper bound for one aggregation (all upstream queries), in seconds
	ANALYTICS_REQUEST_TIMEOUT: float = Field(default=30.0)

	# PostHog
	POSTHOG_API_KEY: str = Field(default="")
	POSTHOG_PROJECT_ID: str = Field(default="")
	POSTHOG_API_HOST: str = Field(default=DEFAULT_POSTHOG_API_HOST)
	POSTHOG_HTTP_TIMEOUT: float = Field(default=10.0)

	# Azure Monitor / Application Insights
	AZURE_MONITOR_CONN_STR: str = Field(default="")
	ENABLE_APP_INSIGHTS: bool = Field(default=True)
	SAMPLING_RATIO: float = Field(default=1.0)

	@field_validator("ANALYTICS_PATH")
	@classmethod
	def normalize_analytics_path(cls, value: str) -> str:
		# The endpoint cannot be mounted at the application root
		path = value.strip().strip("/")
		return f"/{path}" if path else DEFAULT_ANALYTICS_PATH


class PostHogConfig(BaseModel):
	"""Connection details for the PostHog query API."""

	api_key: str
	project_id: str
	api_host: str = DEFAULT_POSTHOG_API_HOST
	timeout: float = 10.0

	class Config:
		frozen = True


def is_posthog_configured(cfg: Settings) -> bool:
	return bool(cfg.POSTHOG_API_KEY and cfg.POSTHOG_PROJECT_ID)


def build_posthog_config(cfg: Settings) -> PostHogConfig:
	"""Build the PostHog client configuration, failing fast on missing credentials."""
	if not is_posthog_configured(cfg):
		raise ConfigurationException(
			"PostHog not configured. Set POSTHOG_API_KEY and POSTHOG_PROJECT_ID.",
		)
	return PostHogConfig(
		api_key=cfg.POSTHOG_API_KEY,
		project_id=cfg.POSTHOG_PROJECT_ID,
		api_host=(cfg.POSTHOG_API_HOST or DEFAULT_POSTHOG_API_HOST).rstrip("/"),
		timeout=cfg.POSTHOG_HTTP_TIMEOUT,
	)


settings = Settings()
