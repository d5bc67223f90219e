# transit_planner/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (.env file).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    APP_NAME: str = "Transit Trip Planner API"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Network data files (stops/routes and per-route key points)
    DATA_FILE: str = "data/main.json"
    KEY_POINTS_FILE: str = "data/key_points.json"

    # Coordinate sanity filter for the deployment region
    MIN_LATITUDE: float = 30.0
    MIN_LONGITUDE: float = 60.0

    # Routing
    MAX_WALKING_DISTANCE_M: float = 300.0
    TRANSFER_PENALTY_MINUTES: float = 3.0
    WALKING_PENALTY_M: float = 200.0
    AVERAGE_SPEED_KMH: float = 20.0

    # Stop lookup
    SEARCH_MIN_QUERY_LENGTH: int = 2
    SEARCH_MAX_RESULTS: int = 50
    NEAREST_STOP_MAX_DISTANCE_M: float = 1_000.0


settings = Settings()
