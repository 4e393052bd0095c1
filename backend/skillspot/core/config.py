import os
from typing import List

from dotenv import load_dotenv

load_dotenv()  # Load .env automatically


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    DATA_BACKEND: str = os.getenv("DATA_BACKEND", "supabase").strip().lower()

    SUPABASE_URL: str = (
        os.getenv("SUPABASE_URL")
        or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
        or ""
    ).strip()
    # Prefer a service key; fall back to the generic one
    SUPABASE_KEY: str = (
        os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        or os.getenv("SUPABASE_SERVICE_KEY")
        or os.getenv("SUPABASE_KEY")
        or ""
    ).strip()

    LOCAL_STORE_PATH: str = os.getenv("LOCAL_STORE_PATH", "data/skillspot.json")

    GEMINI_API_KEY: str = (os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or "").strip()
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip()

    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

    FRONTEND_ORIGIN: str = os.getenv("FRONTEND_ORIGIN", "").strip()
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    SEED_ON_STARTUP: bool = _flag("SEED_ON_STARTUP", "true")

    def allowed_origins(self) -> List[str]:
        origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://localhost",
        ]
        for origin in self.FRONTEND_ORIGIN.split(","):
            origin = origin.strip()
            if origin and origin not in origins:
                origins.append(origin)
        return origins


settings = Settings()
