import json
import os
from dotenv import load_dotenv

DEFAULTS = {
    "ICONGEN_IOS_COLOR": "#ffffff",
    "ICONGEN_CATALOG_AUTHOR": "icon-gen",
    "ICONGEN_LOG_LEVEL": "INFO",
}


class Config:
    _instance = None  # Singleton instance

    def __new__(cls, config_path="icongen.json"):
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance.config_path = config_path
            cls._instance._load_config()
        return cls._instance

    @classmethod
    def reset(cls):
        """Drops the cached instance so the next Config() reloads .env and JSON."""
        cls._instance = None

    def _load_config(self):
        """Loads configuration from .env and the optional JSON file."""
        load_dotenv()
        self.settings = {}
        try:
            with open(self.config_path, "r", encoding="utf-8") as file:
                self.settings.update(json.load(file))
        except FileNotFoundError:
            pass

    def get(self, key, default=None):
        """Get a config value from settings, environment variables or built-in defaults."""
        if default is None:
            default = DEFAULTS.get(key)
        return self.settings.get(key, os.getenv(key, default))
