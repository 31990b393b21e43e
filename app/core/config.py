import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    openrouter_api_key: Optional[str] = Field(default=os.getenv("OPENROUTER_API_KEY"))
    model_name: str = Field(default=os.getenv("AI_MODEL_NAME", "google/gemini-2.0-flash-001"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    temperature: float = 0.6
    timeout_seconds: int = int(os.getenv("AI_TIMEOUT_SECONDS", "30"))

class AnalyticsSettings(BaseModel):
    """Thresholds and list sizes used by the metrics aggregator."""
    red_flag_threshold: float = float(os.getenv("RED_FLAG_THRESHOLD", "6.0"))
    red_flag_limit: int = 10
    top_contributors_limit: int = 5
    goal_alignment_limit: int = 15
    band_high: float = 8.0
    band_mid: float = 6.0
    key_skills_limit: int = 8
    radar_limit: int = 6
    recent_reports_limit: int = 10
    reliability_trend_weeks: int = 4

class Config(BaseModel):
    app_name: str = "Performance Scope Service"
    environment: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # AI Components
    ai: AISettings = AISettings()
    summary_fallback_text: str = "Failed to generate summary."

    # Analytics
    analytics: AnalyticsSettings = AnalyticsSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"
    actor_header: str = "X-Employee-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

settings = Config()

_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing") and not settings.ai.openrouter_api_key:
    _logger.warning("⚠ OPENROUTER_API_KEY is not set, performance summaries will fall back to the default text.")
