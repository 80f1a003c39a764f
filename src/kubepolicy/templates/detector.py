"""Detection of Helm templating syntax in manifest documents."""

from pathlib import Path

from kubepolicy.errors import PolicyIOError

TEMPLATE_MARKERS = ("{{", "}}", ".Values", "include ")


def detect_template(text: str) -> bool:
    """Return True if the text contains any templating marker.

    This is a plain substring scan; a marker inside a string literal
    still counts.
    """
    return any(marker in text for marker in TEMPLATE_MARKERS)


def detect_template_file(document_path: Path) -> bool:
    """Read a document and scan it for templating markers."""
    try:
        content = Path(document_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise PolicyIOError(f"Failed to read '{document_path}'", str(e))
    return detect_template(content)
