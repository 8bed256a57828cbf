"""Top-level package for the Question Bank toolkit.

Provides subpackages:
- qbank_toolkit.core – question models, schema validation, serialization
- qbank_toolkit.storage – embedded versioned question store
- qbank_toolkit.query – tri-state tag filters and the filter engine
- qbank_toolkit.tagging – rule-based bulk topic tagging
- qbank_toolkit.library – cached library service and study sessions
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    import sys
    from pathlib import Path

    if not getattr(sys, 'frozen', False):
        pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    else:
        pyproject = Path(getattr(sys, "_MEIPASS", ".")) / "pyproject.toml"

    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.1.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import PackageNotFoundError, version as pkg_version
        return pkg_version("qbank-toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
