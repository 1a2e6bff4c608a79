"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from typing import List


DEFAULT_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    env: str = "development"

    # ── Server ───────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    service_name: str = "accounts"
    base_path: str = "/v1/accounts"
    cors_origins: List[str] = ["*"]

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///:memory:"

    # ── Tokens & sessions ────────────────────────────────────────────────
    jwt_secret: str = DEFAULT_JWT_SECRET   # HMAC secret for bearer tokens
    jwt_algorithm: str = "HS256"           # the only algorithm the verifier accepts
    jwt_expiry_seconds: int = 86400        # 1 day
    session_cookie_enabled: bool = True
    cookie_name: str = "rh_session"

    # ── Password hashing (argon2id) ──────────────────────────────────────
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536        # KiB
    argon2_parallelism: int = 4

    # ── Error bodies ─────────────────────────────────────────────────────
    problem_base_uri: str = "https://api.retail-hub.com/problems"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def cookie_secure(self) -> bool:
        return self.env != "development"

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET


config = Settings()
