import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DOCUMENTS_DIR = "./tmp-files"
DEFAULT_LIMIT = 100
DEFAULT_MAPPINGS_DB_PATH = "artifacts/collection_mappings.db"


@dataclass(frozen=True)
class SyncSettings:
    api_token: str
    api_base_url: str
    docs_base_url: str
    openwebui_api_token: str
    openwebui_api_url: str
    knowledge_collection_id: str
    documents_dir: Path
    limit: int
    mappings_db_path: Path

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "SyncSettings":
        if dotenv:
            load_dotenv()

        api_base_url = os.getenv("API_BASE_URL", "").strip()
        if not api_base_url:
            raise ValueError("API_BASE_URL is not set. Please set it in your .env file.")

        return cls(
            api_token=os.getenv("API_TOKEN", ""),
            api_base_url=api_base_url.rstrip("/"),
            docs_base_url=os.getenv("DOCS_BASE_URL", "").rstrip("/"),
            openwebui_api_token=os.getenv("OPENWEBUI_API_TOKEN", ""),
            openwebui_api_url=os.getenv("OPENWEBUI_API_URL", "").rstrip("/"),
            knowledge_collection_id=os.getenv("KNOWLEDGE_COLLECTION_ID", "").strip(),
            documents_dir=Path(os.getenv("DOCUMENTS_DIR") or DEFAULT_DOCUMENTS_DIR),
            limit=_parse_limit(os.getenv("LIMIT")),
            mappings_db_path=Path(os.getenv("MAPPINGS_DB_PATH") or DEFAULT_MAPPINGS_DB_PATH),
        )


def _parse_limit(raw: str | None) -> int:
    if not raw:
        return DEFAULT_LIMIT
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_LIMIT
    # offset advances by the limit; zero would never move
    return value if value > 0 else DEFAULT_LIMIT
