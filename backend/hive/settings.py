"""Settings for the Hive backend."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	service_name: str = _env_field("hive-api", "SERVICE_NAME")
	git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
	api_prefix: str = _env_field("/api", "API_PREFIX")

	# Document store
	mongo_url: str = _env_field("mongodb://127.0.0.1:27017", "MONGODB_URI", "MONGO_URL")
	mongo_db_name: str = _env_field("hive", "MONGODB_DB", "MONGO_DB_NAME")
	mongo_timeout_ms: int = _env_field(5000, "MONGODB_TIMEOUT_MS")

	# Cache. REDIS_URL wins over the discrete host/port/credential knobs when set.
	redis_url: Optional[str] = _env_field(None, "REDIS_URL")
	redis_host: str = _env_field("localhost", "REDIS_HOST")
	redis_port: int = _env_field(6379, "REDIS_PORT")
	redis_password: Optional[str] = _env_field(None, "REDIS_PASSWORD")
	redis_db: int = _env_field(0, "REDIS_DB")

	# Bearer tokens
	secret_key: str = _env_field(..., "JWT_SECRET", "SECRET_KEY")
	jwt_ttl_seconds: int = _env_field(7 * 24 * 3600, "JWT_EXPIRES_IN_SECONDS")
	jwt_issuer: str = _env_field("hive-api", "JWT_ISSUER")
	jwt_audience: str = _env_field("hive-web", "JWT_AUDIENCE")
	revocation_fallback_ttl_seconds: int = _env_field(24 * 3600, "REVOCATION_FALLBACK_TTL_SECONDS")
	password_reset_ttl_seconds: int = _env_field(3600, "PASSWORD_RESET_TTL_SECONDS")

	# Password hashing cost (argon2id)
	password_time_cost: int = _env_field(3, "PASSWORD_HASH_TIME_COST")
	password_memory_cost: int = _env_field(65536, "PASSWORD_HASH_MEMORY_COST")
	password_parallelism: int = _env_field(4, "PASSWORD_HASH_PARALLELISM")

	# Placeholder moderation policy until a real role system exists
	moderator_reputation_threshold: int = _env_field(100, "MODERATOR_REPUTATION_THRESHOLD")

	rate_limit_enabled: bool = _env_field(True, "RATE_LIMIT_ENABLED")

	obs_enabled: bool = _env_field(True, "OBS_ENABLED")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
	cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		extra="ignore",
	)

	def is_prod(self) -> bool:
		return self.environment.lower() in ("prod", "production", "live")

	def is_dev(self) -> bool:
		return self.environment.lower() in ("dev", "development")

	def resolved_redis_url(self) -> str:
		if self.redis_url:
			return self.redis_url
		auth = f":{self.redis_password}@" if self.redis_password else ""
		return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

	@field_validator("cors_allow_origins", mode="before")
	def _split_cors(cls, value):  # type: ignore[override]
		if value in (None, ""):
			return ()
		if isinstance(value, str):
			return tuple(part.strip() for part in value.split(",") if part.strip())
		if isinstance(value, (list, tuple, set)):
			return tuple(str(item).strip() for item in value if str(item).strip())
		return ()

	@field_validator("obs_log_level", mode="after")
	def _normalise_level(cls, value: str) -> str:  # type: ignore[override]
		return value.upper()


settings = Settings()
