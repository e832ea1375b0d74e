from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Upstream HTTP
    user_agent: str = "hazardrisk/1.0 github.com/hazardrisk"
    http_timeout_seconds: float = 10.0
    max_response_bytes: int = 2 << 20  # 2 MiB

    # Response cache
    cache_cleanup_interval_seconds: float = 300.0
    elevation_cache_ttl_seconds: float = 24 * 3600
    storm_surge_cache_ttl_seconds: float = 24 * 3600
    hazard_map_cache_ttl_seconds: float = 3600
    weather_alert_cache_ttl_seconds: float = 300

    # Historical landslide events
    historical_radius_km: float = 1.0
    historical_max_results: int = 50
    include_historical_events: bool = True

    # App
    assessment_timeout_seconds: float = 30.0
    debug: bool = False
    log_level: str = "INFO"


settings = Settings()
