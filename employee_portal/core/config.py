from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "employee_portal"
    ENV: str = "dev"
    # Required: the process refuses to start without a signing secret.
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_HASH_ROUNDS: int = 10

    DATABASE_URL: str

    ALLOWED_ORIGINS: str = "http://localhost:3000"
    LOG_LEVEL: str = "INFO"
    PORT: int = 5000

    @field_validator("SECRET_KEY")
    @classmethod
    def secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("SECRET_KEY must not be empty")
        return v

    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

settings = Settings()
