from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://dailytasks:dailytasks@db:5432/dailytasks")

    # Hosted backend (identity provider). Both must be set for cloud mode.
    BACKEND_URL = getenv("BACKEND_URL", "")
    BACKEND_PUBLIC_KEY = getenv("BACKEND_PUBLIC_KEY", "")
    AUTH_JWT_SECRET = getenv("AUTH_JWT_SECRET", "dev-secret-change-in-prod")
    AUTH_JWT_AUDIENCE = getenv("AUTH_JWT_AUDIENCE", "authenticated")
    AUTH_REDIRECT_URL = getenv("AUTH_REDIRECT_URL", "http://localhost:5173")
    AUTH_TIMEOUT = int(getenv("AUTH_TIMEOUT", "10"))

    CALENDAR_API_URL = getenv("CALENDAR_API_URL", "https://www.googleapis.com/calendar/v3")
    CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar.events"
    CALENDAR_TIMEZONE = getenv("CALENDAR_TIMEZONE", "Asia/Tokyo")
    CALENDAR_TIMEOUT = int(getenv("CALENDAR_TIMEOUT", "15"))

    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

    @property
    def cloud_ready(self) -> bool:
        return bool(self.BACKEND_URL and self.BACKEND_PUBLIC_KEY)

settings = Settings()
