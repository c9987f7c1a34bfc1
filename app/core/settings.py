"""
Core settings and environment variables for the Demand Prioritization Engine.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Demand Prioritization Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Dashboard URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Collections owned by the request repository and the risk registry
    REQUESTS_COLLECTION: str = "service_requests"
    RISK_COLLECTION: str = "neighborhood_risk"

    # Mock DB mode: in-memory collaborators seeded from a JSON file
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: str = "./mock_db.json"

    # Default weight coefficients (0-5 each), applied at start and on reset
    DEFAULT_WEIGHT_SEVERITY: int = 3
    DEFAULT_WEIGHT_PEOPLE_IMPACT: int = 2
    DEFAULT_WEIGHT_URGENCY: int = 2
    DEFAULT_WEIGHT_LOCATION_CRITICALITY: int = 2
    DEFAULT_WEIGHT_WAIT_TIME: int = 1
    DEFAULT_WEIGHT_RECURRENCE: int = 1

    # Capacity projection
    THROUGHPUT_WINDOW_DAYS: int = 30     # Trailing window used to measure resolutions/day
    CREW_DAILY_THROUGHPUT: float = 4.0   # Requests one extra crew resolves per day

    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def default_weights(self) -> dict:
        return {
            "severity": self.DEFAULT_WEIGHT_SEVERITY,
            "people_impact": self.DEFAULT_WEIGHT_PEOPLE_IMPACT,
            "urgency": self.DEFAULT_WEIGHT_URGENCY,
            "location_criticality": self.DEFAULT_WEIGHT_LOCATION_CRITICALITY,
            "wait_time": self.DEFAULT_WEIGHT_WAIT_TIME,
            "recurrence": self.DEFAULT_WEIGHT_RECURRENCE,
        }

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra env vars to prevent crashes


# Global settings instance
settings = Settings()
