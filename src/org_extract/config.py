"""Configuration for org-extract."""

import os
from dataclasses import dataclass
from pathlib import Path

from org_extract.models.record import Identifier

# Default directory for batch exports, used when neither --output-dir nor
# ORG_EXTRACT_OUTPUT_DIR is given.
DEFAULT_OUTPUT_DIR: Path = Path("~/.local/share/org-extract").expanduser()

DEFAULT_FILENAME_TEMPLATE: str = "{counter:04d}-{slug}.json"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ExtractConfig:
    """Options threaded through extraction and export calls."""

    include_inherited_tags: bool = True
    whole_subtree: bool = False
    pretty: bool = True
    filename_template: str = DEFAULT_FILENAME_TEMPLATE

    def format_filename(self, identifier: Identifier) -> str:
        """Render the output filename for a batch identifier."""
        return self.filename_template.format(counter=identifier.counter, slug=identifier.slug)


@dataclass(frozen=True)
class ReaderConfig:
    """Settings used when reading outline text into a node tree.

    In-buffer ``#+TODO:`` lines replace ``todo_keywords`` for that document.
    """

    todo_keywords: tuple[str, ...] = ("TODO", "DONE")
    archive_tag: str = "ARCHIVE"
    tags_exclude_from_inheritance: tuple[str, ...] = ()


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def resolve_output_directory(explicit: Path | None = None) -> Path:
    """Pick the export directory: explicit value, then environment, then default."""
    if explicit is not None:
        return explicit.expanduser()
    env_dir = os.environ.get("ORG_EXTRACT_OUTPUT_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return DEFAULT_OUTPUT_DIR


def config_from_env() -> ExtractConfig:
    """Build an ExtractConfig honoring ORG_EXTRACT_* environment overrides."""
    return ExtractConfig(
        include_inherited_tags=not _env_flag("ORG_EXTRACT_NO_INHERIT"),
        whole_subtree=_env_flag("ORG_EXTRACT_WHOLE_SUBTREE"),
    )
