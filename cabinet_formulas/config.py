from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./cabinets.db"
    APP_NAME: str = "Cabinet Formulas"
    LOG_LEVEL: str = "INFO"

    # Formulas longer than this are rejected before scanning
    FORMULA_MAX_LENGTH: int = 255

    SEED_ON_STARTUP: bool = True

    class Config:
        env_file = ".env"


settings = Settings()
