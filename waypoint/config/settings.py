import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    """
    Application configuration settings.
    Loads from environment variables with defaults.
    """
    PROJECT_NAME: str = "Waypoint Project Tracker API"
    PROJECT_VERSION: str = "1.0.0"

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./waypoint.db")

    ACCESS_SECRET_KEY: str = os.getenv("JWT_ACCESS_SECRET", "access-secret-key")
    REFRESH_SECRET_KEY: str = os.getenv("JWT_REFRESH_SECRET", "refresh-secret-key")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
    REFRESH_TOKEN_EXPIRE_HOURS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_HOURS", "12"))

    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "Admin@123")
    ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Administrator")

    # Upper bound for a single work log entry, enforced by request validation
    MAX_WORK_TIME_MS: int = 24 * 60 * 60 * 1000

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    ALLOWED_ORIGINS: list = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

settings = Settings()
