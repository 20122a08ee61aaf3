from pydantic import field_validator
from pydantic_settings import BaseSettings

AES_KEY_SIZE = 32  # AES-256


class Config(BaseSettings):
    """Application configuration loaded from environment variables.

    Both secrets are validated here so a misconfigured process fails at
    startup rather than on the first request.
    """

    database_url: str
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    jwt_secret: str  # HMAC key for session tokens
    aes_secret: str  # Field encryption key, exactly 32 bytes when UTF-8 encoded
    cookie_secure: bool = True  # Disable only for local development over plain HTTP
    login_path: str = "/login"  # Where unauthenticated page requests are redirected
    cors_origins: list[str] = []
    seed_demo_user: bool = False  # Create demo@example.com / demo123 on startup

    model_config = {
        "env_file": [".env"],
        "env_prefix": "TASKVAULT_",
        "extra": "ignore",
    }

    @field_validator("jwt_secret")
    @classmethod
    def _check_jwt_secret(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("jwt_secret must not be empty")
        return value

    @field_validator("aes_secret")
    @classmethod
    def _check_aes_secret(cls, value: str) -> str:
        if len(value.encode("utf-8")) != AES_KEY_SIZE:
            raise ValueError(f"aes_secret must be exactly {AES_KEY_SIZE} bytes")
        return value

    @property
    def aes_key(self) -> bytes:
        return self.aes_secret.encode("utf-8")
