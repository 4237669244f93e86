from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Groq exposes an OpenAI-compatible chat completions endpoint
	groq_api_key: str | None = Field(default=None, validation_alias="GROQ_API_KEY")
	groq_base_url: str = Field(default="https://api.groq.com/openai/v1", validation_alias="GROQ_BASE_URL")
	# "main" model handles structured content, "creative" handles quotes and stories
	groq_model: str = Field(default="llama-3.1-8b-instant", validation_alias="GROQ_MODEL")
	groq_model_creative: str = Field(default="llama-3.3-70b-versatile", validation_alias="GROQ_MODEL_CREATIVE")
	completion_timeout_seconds: float = Field(default=60.0, validation_alias="COMPLETION_TIMEOUT_SECONDS")

	# Auth configuration
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=24 * 60, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	# Comma-separated list of emails allowed on /admin routes
	admin_emails_raw: str = Field(default="", validation_alias="ADMIN_EMAILS")

	# Rate limiting (fixed window per client address + path)
	rate_limit_max_requests: int = Field(default=100, validation_alias="RATE_LIMIT_MAX_REQUESTS")
	rate_limit_window_seconds: int = Field(default=60, validation_alias="RATE_LIMIT_WINDOW_SECONDS")

	# Scheduled generation and cleanup
	scheduler_enabled: bool = Field(default=True, validation_alias="SCHEDULER_ENABLED")
	word_batch_size: int = Field(default=15, validation_alias="WORD_BATCH_SIZE")
	idiom_batch_size: int = Field(default=10, validation_alias="IDIOM_BATCH_SIZE")
	daily_content_retention_days: int = Field(default=30, validation_alias="DAILY_CONTENT_RETENTION_DAYS")
	anonymous_result_retention_days: int = Field(default=7, validation_alias="ANONYMOUS_RESULT_RETENTION_DAYS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def admin_emails(self) -> List[str]:
		return [e.strip().lower() for e in self.admin_emails_raw.split(",") if e.strip()]

settings = Settings()
