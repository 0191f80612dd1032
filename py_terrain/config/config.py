from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables (PY_TERRAIN_*)."""

    model_config = SettingsConfigDict(env_prefix="PY_TERRAIN_", extra="ignore")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Generation Configuration
    default_terrain_seed: int = Field(default=1337, description="Noise seed used when none is given")
    default_scatter_seed: int = Field(default=12345, description="Scatter seed used when none is given")
    max_quads_per_axis: int = Field(
        default=1024, description="Largest quad count per axis accepted by the API"
    )


# Instantiate singleton settings object
settings = Settings()
