"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    HOST: str
    PORT: int
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool
    INCLUDE_UNGRADED_SUBJECTS: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'student_api.db'}")
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", "8081"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        # Lists subjects the student has never graded as PENDIENTE instead of hiding them.
        self.INCLUDE_UNGRADED_SUBJECTS = os.getenv("INCLUDE_UNGRADED_SUBJECTS", "true").lower() == "true"
        self._validate()

    def _validate(self):
        if not 0 < self.PORT < 65536:
            raise RuntimeError(f"PORT must be between 1 and 65535, got {self.PORT}")


settings = Settings()
