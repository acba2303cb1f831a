"""Mapping table and address list loader."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from defi_position_reconciler.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent
CHAINS_FILE = DATA_DIR / "chains.yaml"
ALIASES_FILE = DATA_DIR / "protocol_aliases.yaml"


class ChainEntry(BaseModel):
    """
    Provider-native identifiers of one canonical chain.

    Attributes
    ----------
    chain_id : int
        Numeric EVM chain id
    debank : str
        DeBank chain slug (e.g. 'eth', 'matic')
    zerion : str
        Zerion chain slug (e.g. 'ethereum', 'polygon')

    """

    model_config = ConfigDict(frozen=True)

    chain_id: int
    debank: str
    zerion: str


class ChainTable(BaseModel):
    """Canonical chain key -> provider-native identifiers, validated to be 1:1."""

    model_config = ConfigDict(frozen=True)

    chains: dict[str, ChainEntry]

    @model_validator(mode="after")
    def _check_one_to_one(self) -> "ChainTable":
        for field in ("chain_id", "debank", "zerion"):
            seen: dict[Any, str] = {}
            for key, entry in self.chains.items():
                value = getattr(entry, field)
                if value in seen:
                    msg = f"Duplicate {field} {value!r} for chains {seen[value]!r} and {key!r}"
                    raise ValueError(msg)
                seen[value] = key
        return self


class AliasTable(BaseModel):
    """Canonical chain key -> Zerion protocol name -> DeBank protocol name."""

    model_config = ConfigDict(frozen=True)

    aliases: dict[str, dict[str, str]] = {}


def _read_yaml(path: Path, loader: type = yaml.SafeLoader) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.load(f, Loader=loader)  # noqa: S506
    except FileNotFoundError as e:
        msg = f"Configuration file not found: {path}"
        raise ConfigurationError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {path}: {e}"
        raise ConfigurationError(msg) from e


def load_chain_table(path: Path | None = None) -> ChainTable:
    """
    Load the chain identity table.

    Parameters
    ----------
    path : Path | None
        YAML file to read (default: packaged chains.yaml)

    Returns
    -------
    ChainTable
        Validated chain table

    Raises
    ------
    ConfigurationError
        If the file is missing, unparsable, or not 1:1

    """
    path = path or CHAINS_FILE
    try:
        table = ChainTable.model_validate(_read_yaml(path) or {})
    except ValidationError as e:
        msg = f"Invalid chain table in {path}: {e}"
        raise ConfigurationError(msg) from e
    logger.debug("Loaded %d chains from %s", len(table.chains), path)
    return table


def load_alias_table(path: Path | None = None) -> AliasTable:
    """
    Load the chain-scoped protocol alias table.

    Parameters
    ----------
    path : Path | None
        YAML file to read (default: packaged protocol_aliases.yaml)

    Returns
    -------
    AliasTable
        Validated alias table

    Raises
    ------
    ConfigurationError
        If the file is missing or invalid

    """
    path = path or ALIASES_FILE
    try:
        table = AliasTable.model_validate(_read_yaml(path) or {})
    except ValidationError as e:
        msg = f"Invalid alias table in {path}: {e}"
        raise ConfigurationError(msg) from e
    logger.debug("Loaded aliases for %d chains from %s", len(table.aliases), path)
    return table


def load_address_list(path: Path) -> list[str]:
    """
    Load a YAML list of wallet addresses.

    Every scalar is read as a string so hex addresses are not turned into
    integers.

    Parameters
    ----------
    path : Path
        YAML file containing a list of addresses

    Returns
    -------
    list[str]
        Addresses with surrounding whitespace removed

    Raises
    ------
    ConfigurationError
        If the file is missing or is not a list

    """
    addresses = _read_yaml(path, loader=yaml.BaseLoader)
    if not isinstance(addresses, list):
        msg = f"Invalid address list in {path}: expected a list of addresses"
        raise ConfigurationError(msg)
    return [str(address).strip() for address in addresses if str(address).strip()]
