"""Top-level package for the StudyBrick paper toolkit.

Provides subpackages:
- studybrick_toolkit.core – question/resource/viewer models and serialization
- studybrick_toolkit.catalog – catalog store and identity provider interfaces
- studybrick_toolkit.visibility – per-viewer visibility filtering
- studybrick_toolkit.drafts – ordered selection store and draft persistence
- studybrick_toolkit.paper – print and interactive paper layouts
- studybrick_toolkit.export – rasterization and PDF export
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            for line in pyproject.read_text().splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    try:
        from importlib.metadata import version as pkg_version
        return pkg_version("studybrick-toolkit")
    except Exception:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
