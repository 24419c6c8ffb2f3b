from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"

_COMMIT_MODES = "^(transaction|per-document)$"


class ApiConfig(BaseModel):
    api_version: str = "v1"
    timeout: int = 30
    user_agent: str = "dataset-migrations/0.1"
    use_cdn: bool = False


class FetchConfig(BaseModel):
    strategy: str = Field(default="bulk", pattern="^(bulk|paged)$")
    bulk_limit: int = 1000000
    page_size: int = Field(default=250, gt=0)


class CommitConfig(BaseModel):
    max_workers: int = Field(default=8, gt=0)


class RichDateConfig(BaseModel):
    field: str = "_type"
    match_value: str = "date"
    replacement: str = "richDate"
    commit_mode: str = Field(default="transaction", pattern=_COMMIT_MODES)


class DraftRefsConfig(BaseModel):
    drafts_prefix: str = "drafts."
    commit_mode: str = Field(default="transaction", pattern=_COMMIT_MODES)


class BlockSpansConfig(BaseModel):
    block_type: str = "block"
    legacy_field: str = "spans"
    known_span_keys: List[str] = ["_type", "_key", "text"]
    key_length: int = Field(default=8, gt=0, le=40)
    commit_mode: str = Field(default="per-document", pattern=_COMMIT_MODES)


class MigrationsConfig(BaseModel):
    rich_date: RichDateConfig = RichDateConfig()
    draft_refs: DraftRefsConfig = DraftRefsConfig()
    block_spans: BlockSpansConfig = BlockSpansConfig()


class GlobalYAMLConfig(BaseModel):
    api: ApiConfig = ApiConfig()
    fetch: FetchConfig = FetchConfig()
    commit: CommitConfig = CommitConfig()
    migrations: MigrationsConfig = MigrationsConfig()


def load_yaml_config(path: Path = CONFIG_PATH) -> GlobalYAMLConfig:
    if not path.exists():
        return GlobalYAMLConfig()
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return GlobalYAMLConfig(**raw)


class Secrets(BaseSettings):
    # read from SANITY_AUTH_TOKEN
    sanity_auth_token: Optional[str] = None

    class Config:
        env_file = ".env"
        extra = "ignore"


yaml_config = load_yaml_config()
secrets = Secrets()
