from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, model_validator
from typing import List, Optional
from dotenv import load_dotenv
import os
load_dotenv()  # populates os.environ from .env


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage; file paths default to <data_dir>/<name> when unset
    data_dir: str = "data"
    inventory_file: Optional[str] = None
    recipes_file: Optional[str] = None
    shopping_list_file: Optional[str] = None
    events_file: Optional[str] = None
    metrics_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://127.0.0.1:3000"])

    @model_validator(mode="after")
    def _default_paths(self) -> "Settings":
        defaults = {
            "inventory_file": "inventory.json",
            "recipes_file": "recipes.json",
            "shopping_list_file": "shopping_list.json",
            "events_file": "kitchen_log.jsonl",
            "metrics_file": "latency_log.jsonl",
        }
        for field_name, filename in defaults.items():
            if not getattr(self, field_name):
                setattr(self, field_name, os.path.join(self.data_dir, filename))
        return self
