from dataclasses import dataclass
from pathlib import Path

from pathvalidate import validate_filename

from src.docsync.domain.rules import filename_safe

MARKDOWN_SUFFIX = ".md"
UNTITLED_STEM = "untitled"


@dataclass(frozen=True)
class StagedFile:
    path: Path
    # name of the collection subdirectory, None for files at the staging root
    collection: str | None


class MarkdownFileSink:
    def __init__(self, staging_dir: str | Path) -> None:
        self.staging_dir = Path(staging_dir)

    def path_for(self, title: str, collection_name: str | None = None) -> Path:
        directory = self.staging_dir
        if collection_name:
            safe_collection = filename_safe(collection_name)
            if safe_collection:
                directory = directory / safe_collection
        stem = filename_safe(title) or UNTITLED_STEM
        filename = f"{stem}{MARKDOWN_SUFFIX}"
        validate_filename(filename, platform="auto")
        return directory / filename

    def write_markdown(self, title: str, content: str, collection_name: str | None = None) -> Path:
        file_path = self.path_for(title, collection_name)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        return file_path

    def list_markdown_files(self) -> list[StagedFile]:
        """List `.md` files at the staging root and one level of collection subdirectories.

        Raises OSError when the staging directory itself cannot be read.
        """
        staged: list[StagedFile] = []
        subdirs: list[Path] = []
        for entry in sorted(self.staging_dir.iterdir()):
            if entry.is_dir():
                subdirs.append(entry)
            elif entry.is_file() and entry.name.endswith(MARKDOWN_SUFFIX):
                staged.append(StagedFile(path=entry, collection=None))

        for subdir in subdirs:
            for entry in sorted(subdir.iterdir()):
                if entry.is_file() and entry.name.endswith(MARKDOWN_SUFFIX):
                    staged.append(StagedFile(path=entry, collection=subdir.name))
        return staged
