"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    output_dir: Path = Field(default=Path("output"), alias="OUTPUT_DIR")
    assets_dir: Path = Field(default=Path("assets"), alias="ASSETS_DIR")
    fonts_dir_override: Optional[Path] = Field(default=None, alias="FONTS_DIR")
    camera_icon_path: Optional[Path] = Field(default=None, alias="CAMERA_ICON_PATH")

    # Asset addressing: keys resolve under this base URL when set, else under assets_dir
    asset_base_url: Optional[str] = Field(default=None, alias="ASSET_BASE_URL")

    # Asset fetch transport
    http_timeout_seconds: float = Field(default=15.0, alias="HTTP_TIMEOUT_SECONDS")
    http_max_attempts: int = Field(default=3, alias="HTTP_MAX_ATTEMPTS")
    user_agent: str = Field(default="cardkit/0.1", alias="USER_AGENT")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def fonts_dir(self) -> Path:
        """Path to the fonts directory."""
        return self.fonts_dir_override or self.assets_dir / "fonts"

    @property
    def default_camera_icon(self) -> Optional[Path]:
        """Camera icon for the bottom bar, if one ships with the assets."""
        if self.camera_icon_path:
            return self.camera_icon_path
        candidate = self.assets_dir / "icons" / "camera.png"
        return candidate if candidate.exists() else None


# Global settings instance
settings = Settings()
