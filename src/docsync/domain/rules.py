import re

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_FILENAME_INVALID = re.compile(r"[^A-Za-z0-9_-]")


def slugify(title: str) -> str:
    return _SLUG_INVALID.sub("-", (title or "").lower()).strip("-")


def filename_safe(title: str) -> str:
    return _FILENAME_INVALID.sub("", (title or "").replace(" ", "_"))


def build_document_url(docs_base_url: str, title: str, url_id: str) -> str:
    return f"{docs_base_url.rstrip('/')}/{slugify(title)}-{url_id}"


def build_export_content(document_url: str, body: str) -> str:
    return f"Document URL: {document_url}\n\n{body}"
