"""
Module: config

Purpose:
    Configuration dataclass for a question library. Immutable configuration
    with validation on construction.

Key Classes:
    - LibraryConfig: Store location and library behaviour switches

Dependencies:
    - dataclasses (std)
    - pathlib (std)
    - common.paths: Default data locations

Used By:
    - library.service.QuestionLibrary
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from qbank_toolkit.common.paths import get_database_path, get_export_dir


@dataclass(frozen=True)
class LibraryConfig:
    """
    Configuration for a question library (immutable).

    Attributes:
        db_path: SQLite file backing the question store
        timeout_s: Engine wait on a locked database, in seconds
        keep_metadata: Seed new questions with the last saved metadata
        validate_images: Reject saves whose image references don't decode
        export_dir: Default directory for JSON exports

    Example:
        >>> config = LibraryConfig(db_path=Path("/tmp/qbank.sqlite3"))
        >>> config.keep_metadata
        False
    """

    db_path: Path
    timeout_s: float = 5.0
    keep_metadata: bool = False
    validate_images: bool = True
    export_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if str(Path(self.db_path)) == ".":
            raise ValueError(f"db_path must name a file: {self.db_path!r}")
        if self.timeout_s < 0:
            raise ValueError(f"timeout_s must be non-negative: {self.timeout_s}")

    @classmethod
    def default(cls, **overrides) -> LibraryConfig:
        """Config using the standard per-user data locations."""
        values = {"db_path": get_database_path(), "export_dir": get_export_dir()}
        values.update(overrides)
        return cls(**values)

    @property
    def resolved_export_dir(self) -> Path:
        """Export directory, falling back to an exports/ folder beside the database."""
        return self.export_dir or Path(self.db_path).parent / "exports"
