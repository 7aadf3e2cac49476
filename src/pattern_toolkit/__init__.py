"""Top-level package for the Pattern Toolkit.

Provides subpackages:
- pattern_toolkit.core – data models and the error taxonomy
- pattern_toolkit.renderer – PDF page rasterization
- pattern_toolkit.merger – grid compositing of page bitmaps
- pattern_toolkit.export – output scaling and PNG/PDF encoding
- pattern_toolkit.service – upload/merge job orchestration
- pattern_toolkit.api – HTTP boundary (FastAPI)
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text()
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    from importlib.metadata import version as pkg_version, PackageNotFoundError

    try:
        return pkg_version("pattern-toolkit")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
