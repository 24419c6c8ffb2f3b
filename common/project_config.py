from __future__ import annotations

from pathlib import Path

import orjson
from pydantic import BaseModel, Field, ValidationError

PROJECT_FILE = "sanity.json"


class ProjectConfigError(Exception):
    pass


class ProjectApi(BaseModel):
    project_id: str = Field(alias="projectId", min_length=1)
    dataset: str = Field(min_length=1)


class ProjectConfig(BaseModel):
    """The `api` block of a studio's sanity.json; other keys are ignored."""

    api: ProjectApi


def load_project_config(cwd: Path | None = None) -> ProjectConfig:
    path = (cwd or Path.cwd()) / PROJECT_FILE
    try:
        raw = orjson.loads(path.read_bytes())
        return ProjectConfig(**raw)
    except (OSError, orjson.JSONDecodeError, TypeError, ValidationError) as e:
        raise ProjectConfigError(str(e)) from e
