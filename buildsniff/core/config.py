import os

from pydantic import BaseModel


APP_VERSION = "1.0.0"


class Settings(BaseModel):
    # Detection: bytes sampled from the head of each file
    CONTENT_SAMPLE_SIZE: int = int(os.getenv("CONTENT_SAMPLE_SIZE", "50000"))

    # Description table (packaged YAML used when unset)
    DESCRIPTIONS_PATH: str | None = os.getenv("DESCRIPTIONS_PATH")

    # Transient files written during extract-then-normalize
    TMP_DIR: str | None = os.getenv("TMP_DIR")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
