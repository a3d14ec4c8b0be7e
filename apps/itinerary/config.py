import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    GROQ_API_KEY: str | None = os.getenv("GROQ_API_KEY")
    MODEL: str = os.getenv("ITINERARY_MODEL", "llama-3.3-70b-versatile")
    TEMPERATURE: float = float(os.getenv("ITINERARY_TEMPERATURE", "0.4"))
    TIMEOUT: float = float(os.getenv("ITINERARY_TIMEOUT", "60"))

    SAVED_PLANS_PATH: str = os.getenv(
        "SAVED_PLANS_PATH", os.path.join(os.path.dirname(__file__), "memory", "saved_plans.json")
    )
    EXPORT_DIR: str = os.getenv("EXPORT_DIR", "exports")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    # wall-clock zone of segment times in exported calendars
    TIMEZONE: str = os.getenv("ITINERARY_TZ", "Asia/Kolkata")

    # inputs shorter than this never reach the extraction oracle
    MIN_EXTRACTION_CHARS: int = 10


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
