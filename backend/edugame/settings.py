from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Database
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")

	# Quiz game scoring
	xp_per_question: int = Field(default=5, validation_alias="XP_PER_QUESTION")
	questions_per_attempt: int = Field(default=3, validation_alias="QUESTIONS_PER_ATTEMPT")

	leaderboard_size: int = Field(default=10, validation_alias="LEADERBOARD_SIZE")

	# Badge catalog maintenance run at startup
	seed_badges: bool = Field(default=True, validation_alias="SEED_BADGES")
	fix_badge_images_on_startup: bool = Field(default=False, validation_alias="FIX_BADGE_IMAGES_ON_STARTUP")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
	cors_origins: list[str] = Field(default=["http://localhost:3000"], validation_alias="CORS_ORIGINS")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
