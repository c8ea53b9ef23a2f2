"""Unified settings for formdata-api."""

import tempfile
import tomllib
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def read_pyproject(pyproject_path: Path) -> dict:
    """Read pyproject.toml into a dict, empty when the file is not shipped."""
    if not pyproject_path.is_file():
        return {}
    with pyproject_path.open("rb") as file_handle:
        return tomllib.load(file_handle)


def get_version(project: dict) -> str:
    """Get version from package metadata or fallback to pyproject."""
    try:
        import importlib.metadata

        return importlib.metadata.version("formdata-api")
    except Exception:
        return project.get("project", {}).get("version", "0.0.0")


class Settings(BaseSettings):
    """Unified settings for formdata-api service."""

    DEBUG: bool = True
    ENVIRONMENT: Literal["DEV", "PROD"] = "DEV"

    # ClassVar to prevent Pydantic from trying to load from env
    BASE_DIR: ClassVar[Path] = Path(__file__).parent.parent.parent
    PROJECT: ClassVar[dict] = read_pyproject(BASE_DIR / "pyproject.toml")
    API_NAME: ClassVar[str] = PROJECT.get("project", {}).get("name", "formdata-api")
    API_DESCRIPTION: ClassVar[str] = PROJECT.get("project", {}).get("description", "Multipart form-data parser")
    API_VERSION: ClassVar[str] = get_version(PROJECT)

    # Server
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Uploads
    UPLOAD_MAX_FILESIZE: str = "2M"
    UPLOAD_TMP_DIR: str | None = Field(default_factory=tempfile.gettempdir)
    FORM_CHARSET: str = "utf-8"
    MAX_FILE_SIZE_FIELD: ClassVar[str] = "MAX_FILE_SIZE"

    @property
    def api_url(self) -> str:
        return f"http://{self.API_HOST}:{self.API_PORT}"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()  # type: ignore
