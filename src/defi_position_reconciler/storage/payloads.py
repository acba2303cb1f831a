"""Filesystem source of raw provider payloads."""

import json
import logging
from pathlib import Path

from defi_position_reconciler.core.models import PayloadState, SourceDocument

logger = logging.getLogger(__name__)


class PayloadSource:
    """
    Reads raw per-chain payloads written by a provider fetcher.

    Layout: ``<root>/<address>/<chain slug>.json``. Missing files and
    unparsable JSON (including oversized integer literals and excessive
    nesting) are reported through ``SourceDocument.state`` rather than raised.

    Parameters
    ----------
    root : Path
        Provider data directory
    provider : str
        Provider name, used in log messages

    """

    def __init__(self, root: Path, provider: str) -> None:
        self.root = Path(root)
        self.provider = provider

    def exists(self) -> bool:
        return self.root.is_dir()

    def addresses(self) -> list[str]:
        """
        List addresses that have a data directory.

        Returns
        -------
        list[str]
            Directory names under the root, sorted; empty if the root is missing

        """
        if not self.exists():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())

    def path_for(self, address: str, key: str) -> Path:
        return self.root / address / f"{key}.json"

    def load(self, address: str, key: str) -> SourceDocument:
        """
        Load one payload.

        Parameters
        ----------
        address : str
            Wallet address (directory name)
        key : str
            Provider-native chain slug (file stem)

        Returns
        -------
        SourceDocument
            PRESENT with the parsed document, ABSENT, or MALFORMED

        """
        path = self.path_for(address, key)
        if not path.is_file():
            return SourceDocument(state=PayloadState.ABSENT, location=str(path), detail="file not found")

        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("Error reading %s payload %s: %s", self.provider, path, e)
            return SourceDocument(state=PayloadState.MALFORMED, location=str(path), detail=str(e))

        return SourceDocument(state=PayloadState.PRESENT, document=document, location=str(path))
