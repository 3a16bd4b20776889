"""ABOUTME: Path and environment settings for the project.
ABOUTME: Locates the configs directory holding logging and ranking YAML files."""

from pathlib import Path

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tierdex import __version__


def _get_project_root() -> Path:
    """Find project root by looking for pyproject.toml."""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    return Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Contains settings for this project.

    Every field can be overridden with a ``TIERDEX_`` prefixed environment variable.
    """

    model_config = SettingsConfigDict(env_prefix="TIERDEX_")

    VERSION: str = __version__
    """Project version."""

    PROJECT_ROOT: Path = _get_project_root()
    """Root directory of the project."""

    RANKING_CONFIG: Path | None = None
    """Explicit ranking config file; falls back to configs/ranking.yml."""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def configs_dir(self) -> Path:
        """Directory containing configuration files."""
        return self.PROJECT_ROOT / "configs"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def logging_config_path(self) -> Path:
        """Path to the logging.yml configuration file."""
        return self.configs_dir / "logging.yml"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ranking_config_path(self) -> Path:
        """Path to the ranking.yml configuration file."""
        if self.RANKING_CONFIG is not None:
            return self.RANKING_CONFIG
        return self.configs_dir / "ranking.yml"


settings = Settings()
