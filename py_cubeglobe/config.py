"""Configuration management."""

from typing import Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CUBEGLOBE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    # Terrain generation defaults
    default_length: int = Field(default=64, description="Default edge length of the map")
    default_frequency: float = Field(default=0.05, description="Default noise frequency")
    default_layer_height: int = Field(default=15, description="Default layer height")
    default_max_water_level: int = Field(default=40, description="Default maximum water level")
    default_min_soil_cutoff: int = Field(default=45, description="Default minimum soil cutoff")
    default_seed: int = Field(default=0, description="Default noise seed")

    # Rendering
    tiles_config: Optional[str] = Field(default=None, description="Path to the tile sheet configuration")
    background_color: Tuple[int, int, int, int] = Field(
        default=(154, 216, 224, 255), description="Canvas background as RGBA"
    )
    output_dir: str = Field(default="./output", description="Directory for rendered images")


settings = Settings()
