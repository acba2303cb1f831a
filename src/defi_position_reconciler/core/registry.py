"""Normalizer registry with auto-registration pattern."""

from typing import Any, Protocol

from defi_position_reconciler.core.chains import ChainIdentityMapper
from defi_position_reconciler.core.models import NormalizedChainSnapshot, PayloadResult


class NormalizerInterface(Protocol):
    """
    Interface that all provider normalizers must implement.

    Attributes
    ----------
    provider : str
        Provider name used as the snapshot key in the output (e.g. 'debank')

    Methods
    -------
    payload_key(chain, chains)
        Resource name of the raw payload for a canonical chain
    unwrap(raw)
        Classify a raw payload and extract its records
    normalize(raw, context)
        Build the canonical snapshot for one chain

    """

    provider: str

    def payload_key(self, chain: str, chains: ChainIdentityMapper) -> str | None:
        """
        Get the resource name (file stem) of the payload for a chain.

        Parameters
        ----------
        chain : str
            Canonical chain key
        chains : ChainIdentityMapper
            Chain identity mapper

        Returns
        -------
        str | None
            Provider-native chain slug, or None if unmapped

        """
        ...

    def unwrap(self, raw: Any) -> PayloadResult:
        """Classify a raw payload and extract its records."""
        ...

    def normalize(self, raw: Any, context: Any) -> NormalizedChainSnapshot:
        """Build the canonical snapshot for one chain."""
        ...


class NormalizerRegistry:
    """
    Registry for provider normalizers with auto-registration.

    Normalizers register themselves using the @NormalizerRegistry.register
    decorator. The assembler queries the registry to build one feed per
    provider.

    """

    _normalizers: dict[str, type] = {}

    @classmethod
    def register(cls, normalizer_class: type) -> type:
        """
        Decorator to register a normalizer.

        Parameters
        ----------
        normalizer_class : type
            Normalizer class to register

        Returns
        -------
        type
            The normalizer class (for decorator chaining)

        Examples
        --------
        >>> @NormalizerRegistry.register
        ... class DebankNormalizer(BaseNormalizer):
        ...     provider = "debank"

        """
        if not getattr(normalizer_class, "provider", None):
            msg = f"Normalizer {normalizer_class.__name__} must define 'provider' attribute"
            raise ValueError(msg)

        cls._normalizers[normalizer_class.provider] = normalizer_class
        return normalizer_class

    @classmethod
    def get_normalizer(cls, provider: str) -> type | None:
        """
        Get normalizer class by provider name.

        Parameters
        ----------
        provider : str
            Provider identifier

        Returns
        -------
        type | None
            Normalizer class or None if not found

        """
        return cls._normalizers.get(provider)

    @classmethod
    def get_all_normalizers(cls) -> list[type]:
        return list(cls._normalizers.values())

    @classmethod
    def list_providers(cls) -> list[str]:
        return list(cls._normalizers.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registered normalizers (useful for testing)."""
        cls._normalizers.clear()
