"""Base normalizer class with common functionality."""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from defi_position_reconciler.core.chains import ChainIdentityMapper
from defi_position_reconciler.core.context import NormalizationContext
from defi_position_reconciler.core.models import NormalizedChainSnapshot, PayloadResult, PayloadState

logger = logging.getLogger(__name__)

UNKNOWN_SYMBOL = "?"


def to_float(value: Any) -> float:
    """
    Coerce a raw numeric field to float.

    Parameters
    ----------
    value : Any
        Raw JSON value (number, numeric string, None, ...)

    Returns
    -------
    float
        The number, or 0.0 when absent, non-numeric, or not finite

    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def clean_symbol(value: Any) -> str:
    """Trim surrounding whitespace from a symbol; case and inner characters are kept."""
    if not isinstance(value, str):
        return UNKNOWN_SYMBOL
    return value.strip() or UNKNOWN_SYMBOL


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


class BaseNormalizer(ABC):
    """
    Abstract base class for provider normalizers.

    Subclasses set ``provider`` and implement ``payload_key``, ``unwrap``
    and ``accumulate``. ``normalize`` is total: it never raises on
    malformed input and returns an empty snapshot instead.

    Attributes
    ----------
    provider : str
        Provider name (must be set in subclass)

    """

    provider: ClassVar[str] = ""

    def __init__(self) -> None:
        if not self.provider:
            msg = f"{self.__class__.__name__} must define 'provider' attribute"
            raise ValueError(msg)

    @abstractmethod
    def payload_key(self, chain: str, chains: ChainIdentityMapper) -> str | None:
        """
        Get the resource name of the raw payload for a canonical chain.

        Parameters
        ----------
        chain : str
            Canonical chain key
        chains : ChainIdentityMapper
            Chain identity mapper

        Returns
        -------
        str | None
            Provider-native chain slug, or None if the chain is unmapped

        """
        ...

    @abstractmethod
    def unwrap(self, raw: Any) -> PayloadResult:
        """
        Classify a raw payload and extract its top-level records.

        Parameters
        ----------
        raw : Any
            Parsed JSON document

        Returns
        -------
        PayloadResult
            PRESENT with records, EMPTY, ABSENT (None input), or MALFORMED

        """
        ...

    @abstractmethod
    def accumulate(
        self,
        record: Any,
        snapshot: NormalizedChainSnapshot,
        context: NormalizationContext,
    ) -> None:
        """
        Add one top-level record to the snapshot.

        Parameters
        ----------
        record : Any
            One element of ``PayloadResult.items``
        snapshot : NormalizedChainSnapshot
            Snapshot being built
        context : NormalizationContext
            Chain key and lookup tables

        """
        ...

    def normalize(self, raw: Any, context: NormalizationContext) -> NormalizedChainSnapshot:
        """
        Normalize one raw per-chain payload.

        Parameters
        ----------
        raw : Any
            Parsed JSON document as delivered by the provider
        context : NormalizationContext
            Chain key and lookup tables

        Returns
        -------
        NormalizedChainSnapshot
            Canonical snapshot (empty when the payload is unusable)

        """
        result = self.unwrap(raw)
        if result.state == PayloadState.MALFORMED:
            logger.warning(
                "Ignoring malformed %s payload for %s: %s",
                self.provider,
                context.chain,
                result.detail,
            )
        if not result.usable:
            return NormalizedChainSnapshot.empty()

        snapshot = NormalizedChainSnapshot()
        for record in result.items:
            self.accumulate(record, snapshot, context)
        return snapshot
