"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer

from padboard.utils.persistence import read_model_or_default, write_model


def default_storage_dir() -> Path:
    """Per-user application storage directory."""
    return Path.home() / ".padboard"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # Paths
    storage_dir: Path = Field(
        default_factory=default_storage_dir,
        description="Directory holding saved pads, config and logs",
    )

    # Output device (initialized once per process)
    sample_rate: int = Field(default=44100, gt=0, description="Output sample rate in Hz")
    buffer_duration: float = Field(
        default=0.1, gt=0.0, le=1.0, description="Output buffer length in seconds"
    )
    num_channels: int = Field(default=2, ge=1, le=2, description="Output channels (1=mono, 2=stereo)")
    output_device: int | None = Field(
        default=None, description="Output device ID (None = system default)"
    )

    # Progress reporting
    progress_interval: float = Field(
        default=0.1, gt=0.0, description="Seconds between progress updates while playing"
    )

    # External tools
    transcoder: str = Field(
        default="ffmpeg", description="Executable used to convert .m4a clips to WAV"
    )

    @field_serializer("storage_dir")
    def serialize_path(self, path: Path) -> str:
        """Serialize Path to string."""
        return str(path)

    @property
    def buffer_size(self) -> int:
        """Output buffer size in frames."""
        return max(1, int(self.sample_rate * self.buffer_duration))

    @property
    def pads_file(self) -> Path:
        """Location of the saved pad list."""
        return self.storage_dir / "sounds.json"

    @property
    def log_dir(self) -> Path:
        return self.storage_dir / "logs"

    def ensure_directories(self) -> None:
        """Create storage directories if they don't exist."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses default location
                  (~/.padboard/config.json).

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        if path is None:
            path = default_storage_dir() / "config.json"

        config = read_model_or_default(path, cls)
        config.ensure_directories()
        return config

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        if path is None:
            path = self.storage_dir / "config.json"
        write_model(self, path)
