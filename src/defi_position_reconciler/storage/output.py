"""Comparison dataset output file."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from defi_position_reconciler.core.models import ComparisonDataset

logger = logging.getLogger(__name__)


def write_comparison_file(dataset: ComparisonDataset, path: Path) -> Path:
    """
    Write the comparison dataset as one JSON document.

    The document is written to a temporary file in the target directory and
    moved into place, so readers never see a partially written file.

    Parameters
    ----------
    dataset : ComparisonDataset
        Assembled dataset
    path : Path
        Output file

    Returns
    -------
    Path
        The written file

    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(dataset.to_json_dict(), indent=2)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote comparison data for %d addresses to %s", len(dataset.addresses), path)
    return path


def load_comparison_file(path: Path) -> dict[str, Any]:
    """
    Read a comparison dataset written by ``write_comparison_file``.

    Parameters
    ----------
    path : Path
        Dataset file

    Returns
    -------
    dict[str, Any]
        ``{address: {chain: {provider: snapshot}}}``

    """
    with open(path, encoding="utf-8") as f:
        return json.load(f)
