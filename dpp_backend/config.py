import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    ENV: str = os.getenv("ENV", "development")
    AI_BACKEND: str = os.getenv("AI_BACKEND", "mock")  # 'mock' or 'openai'
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_IMAGE_MODEL: str = os.getenv("OPENAI_IMAGE_MODEL", "dall-e-3")
    DATA_DIR: str = os.getenv("DATA_DIR", "data")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ALLOW_ORIGINS: List[str] = field(default_factory=lambda: os.getenv("ALLOW_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(","))

    @property
    def use_openai(self) -> bool:
        return self.AI_BACKEND == "openai" and bool(self.OPENAI_API_KEY)

settings = Settings()
