import re


def format_document_number(prefix: str, sequence: int, width: int = 4) -> str:
    return f"{prefix}{str(sequence).zfill(width)}"


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
    return slug or "organization"
