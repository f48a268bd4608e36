from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "StorefrontRecommendations"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo (catalog + interaction store)
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "storefront"
    MONGO_TLS: bool = False                       # Atlas / managed clusters

    # Redis (result cache); empty disables caching
    REDIS_URL: str = ""

    # Cache config
    recommendation_cache_ttl: int = 10 * 60       # 10 minutes
    trend_cache_ttl: int = 5 * 60                 # 5 minutes

    # Per sub-strategy budget inside mixed recommendations
    strategy_timeout_s: float = 3.0

    # API
    api_prefix: str = "/api"

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
