"""Data seeding utilities for loading government scheme definitions.

Loads scheme definitions from the bundled ``schemes.json`` file (or a
custom path) and builds the :class:`~src.services.catalog.SchemeCatalog`
served by the API.  Designed to run once at application startup.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from src.models.scheme import Scheme
from src.services.catalog import SchemeCatalog

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

_DATA_DIR: Path = Path(__file__).resolve().parent / "schemes"
_DEFAULT_SCHEMES_PATH: Path = _DATA_DIR / "schemes.json"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_schemes(path: Path | str | None = None) -> list[Scheme]:
    """Load scheme definitions from a JSON file.

    Each entry is validated independently; an entry that fails validation
    is logged and skipped so one bad definition does not take the whole
    catalog down.

    Parameters
    ----------
    path:
        Path to the JSON file.  Defaults to the bundled ``schemes.json``.

    Returns
    -------
    list[Scheme]
        Parsed and validated schemes, in file order.

    Raises
    ------
    FileNotFoundError
        If the JSON file does not exist.
    json.JSONDecodeError
        If the JSON is malformed.
    """
    file_path = Path(path) if path is not None else _DEFAULT_SCHEMES_PATH

    if not file_path.exists():
        raise FileNotFoundError(f"Scheme data file not found: {file_path}")

    with file_path.open("r", encoding="utf-8") as f:
        raw_schemes: list[dict] = json.load(f)

    schemes: list[Scheme] = []
    seen: set[str] = set()
    for raw in raw_schemes:
        try:
            scheme = Scheme.model_validate(raw)
        except Exception:
            logger.warning(
                "seed.parse_error",
                scheme_id=raw.get("scheme_id", "unknown") if isinstance(raw, dict) else "unknown",
                exc_info=True,
            )
            continue
        if scheme.scheme_id in seen:
            logger.warning("seed.duplicate_scheme", scheme_id=scheme.scheme_id)
            continue
        seen.add(scheme.scheme_id)
        schemes.append(scheme)

    logger.info("seed.loaded_schemes", count=len(schemes), source=str(file_path))
    return schemes


def build_catalog(path: Path | str | None = None) -> SchemeCatalog:
    """Load schemes and wrap them in a :class:`SchemeCatalog`."""
    schemes = load_schemes(path)
    if not schemes:
        logger.warning("seed.no_schemes_loaded")
    return SchemeCatalog(schemes)
