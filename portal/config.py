"""Application configuration using Pydantic Settings."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "MMPS Connect"
    debug: bool = False

    # Remote data service (MongoDB)
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "mmps"

    # Session tokens issued by the auth service
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # Elevated channel for creating/updating/deleting login identities
    service_role_key: str = ""

    # Login alias for the principal (admin) account
    admin_username: str = "principal"
    admin_email: str = "principal@mmps"
    # Seeded on startup when set and the principal has no profile yet
    admin_password: str = ""

    # Local persistence of the signed-in identity
    local_storage_path: str = ".mmps-storage.json"

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_production_secrets(self):
        if not self.debug:
            if self.jwt_secret_key in ("change-me-in-production", ""):
                raise ValueError(
                    "JWT_SECRET_KEY must be set to a strong secret when DEBUG is not enabled. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )
            if not self.service_role_key:
                raise ValueError("SERVICE_ROLE_KEY must be set when DEBUG is not enabled.")
        return self


settings = Settings()
