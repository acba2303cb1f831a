"""Reconciliation assembler for pairing provider snapshots per address and chain."""

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from defi_position_reconciler.core.aliases import ProtocolAliasResolver
from defi_position_reconciler.core.chains import ChainIdentityMapper
from defi_position_reconciler.core.context import NormalizationContext
from defi_position_reconciler.core.models import (
    ComparisonDataset,
    ComparisonRecord,
    NormalizedChainSnapshot,
    PayloadState,
    SourceDocument,
)
from defi_position_reconciler.core.registry import NormalizerInterface, NormalizerRegistry
from defi_position_reconciler.exceptions import ReconciliationError
from defi_position_reconciler.storage.payloads import PayloadSource

logger = logging.getLogger(__name__)


class ProviderFeed:
    """
    A provider's normalizer paired with the source of its raw payloads.

    Parameters
    ----------
    normalizer : NormalizerInterface
        Provider normalizer
    source : PayloadSource
        Where the provider's raw payloads live

    """

    def __init__(self, normalizer: NormalizerInterface, source: PayloadSource) -> None:
        self.normalizer = normalizer
        self.source = source

    @property
    def provider(self) -> str:
        return self.normalizer.provider


class ReconciliationAssembler:
    """
    Builds the comparison dataset from every provider's raw payloads.

    Workflow:
    1. Collect addresses with a data directory under any provider root
    2. Intersect with the allow-list, if one is configured
    3. For each address and canonical chain, load and normalize each
       provider's payload
    4. Pair the snapshots into one ComparisonRecord

    The assembler is provider-agnostic: it only talks to normalizers through
    ``payload_key`` and ``normalize``.

    Parameters
    ----------
    feeds : list[ProviderFeed]
        One feed per provider; output snapshots keep this order
    chains : ChainIdentityMapper
        Chain identity mapper
    aliases : ProtocolAliasResolver
        Protocol alias resolver
    allow_list : Iterable[str] | None
        Addresses to restrict the pass to (matched case-insensitively)

    """

    def __init__(
        self,
        feeds: list[ProviderFeed],
        chains: ChainIdentityMapper,
        aliases: ProtocolAliasResolver,
        allow_list: Iterable[str] | None = None,
    ) -> None:
        if not feeds:
            msg = "At least one provider feed is required"
            raise ValueError(msg)
        self.feeds = feeds
        self.chains = chains
        self.aliases = aliases
        self.allow_list = {a.lower() for a in allow_list} if allow_list is not None else None
        # Output address -> provider -> directory name on disk
        self._directories: dict[str, dict[str, str]] = {}

    @classmethod
    def from_directories(
        cls,
        roots: Mapping[str, Path],
        chains: ChainIdentityMapper,
        aliases: ProtocolAliasResolver,
        allow_list: Iterable[str] | None = None,
    ) -> "ReconciliationAssembler":
        """
        Build an assembler from registered normalizers and data directories.

        Parameters
        ----------
        roots : Mapping[str, Path]
            Provider name -> raw data directory
        chains : ChainIdentityMapper
            Chain identity mapper
        aliases : ProtocolAliasResolver
            Protocol alias resolver
        allow_list : Iterable[str] | None
            Optional address allow-list

        Returns
        -------
        ReconciliationAssembler
            Assembler with one feed per entry in ``roots``

        Raises
        ------
        ReconciliationError
            If a provider has no registered normalizer

        """
        feeds = []
        for provider, root in roots.items():
            normalizer_class = NormalizerRegistry.get_normalizer(provider)
            if normalizer_class is None:
                msg = f"No normalizer registered for provider {provider!r}"
                raise ReconciliationError(msg)
            feeds.append(ProviderFeed(normalizer_class(), PayloadSource(root, provider)))
        return cls(feeds, chains, aliases, allow_list)

    def discover_addresses(self) -> list[str]:
        """
        Get the addresses to process.

        Returns
        -------
        list[str]
            Sorted union of address directories across providers, filtered by
            the allow-list. Directories whose names differ only in case are
            merged under the first provider's spelling.

        Raises
        ------
        ReconciliationError
            If no provider data directory exists

        """
        available_roots = [feed for feed in self.feeds if feed.source.exists()]
        if not available_roots:
            roots = ", ".join(str(feed.source.root) for feed in self.feeds)
            msg = f"No provider data directory found (looked in: {roots})"
            raise ReconciliationError(msg)

        for feed in self.feeds:
            if feed not in available_roots:
                logger.warning(
                    "%s data directory %s not found; its snapshots will be empty",
                    feed.provider,
                    feed.source.root,
                )

        grouped: dict[str, dict[str, str]] = {}
        for feed in available_roots:
            for name in feed.source.addresses():
                spellings = grouped.setdefault(name.lower(), {})
                if feed.provider in spellings:
                    logger.warning(
                        "Ignoring %s directory %s: same address as %s",
                        feed.provider,
                        name,
                        spellings[feed.provider],
                    )
                    continue
                spellings[feed.provider] = name

        if self.allow_list is not None:
            grouped = {key: spellings for key, spellings in grouped.items() if key in self.allow_list}

        self._directories = {}
        for spellings in grouped.values():
            address = next(iter(spellings.values()))
            if len(set(spellings.values())) > 1:
                logger.warning(
                    "Address %s is spelled differently across providers (%s); merging",
                    address,
                    ", ".join(f"{provider}={name}" for provider, name in spellings.items()),
                )
            self._directories[address] = spellings

        return sorted(self._directories)

    def run(self) -> ComparisonDataset:
        """
        Run a full reconciliation pass.

        Returns
        -------
        ComparisonDataset
            Records for every address and chain with at least one payload

        """
        addresses = self.discover_addresses()
        logger.info("Reconciling %d addresses across %d chains", len(addresses), len(self.chains))

        dataset = ComparisonDataset(addresses=addresses)
        for address in addresses:
            for chain in self.chains.canonical_keys():
                record = self.assemble_record(address, chain)
                if record is not None:
                    dataset.records.append(record)
        return dataset

    def assemble_record(self, address: str, chain: str) -> ComparisonRecord | None:
        """
        Pair every provider's snapshot for one address and chain.

        Parameters
        ----------
        address : str
            Wallet address as stored on disk
        chain : str
            Canonical chain key

        Returns
        -------
        ComparisonRecord | None
            The record, or None if no provider has a payload for this chain

        """
        documents = {feed.provider: self._load(feed, address, chain) for feed in self.feeds}
        if all(doc.state == PayloadState.ABSENT for doc in documents.values()):
            return None

        context = NormalizationContext(chain=chain, chains=self.chains, aliases=self.aliases)
        snapshots = {
            feed.provider: self._normalize(feed, documents[feed.provider], context, address) for feed in self.feeds
        }
        return ComparisonRecord(address=address, chain=chain, snapshots=snapshots)

    def _load(self, feed: ProviderFeed, address: str, chain: str) -> SourceDocument:
        key = feed.normalizer.payload_key(chain, self.chains)
        if key is None:
            logger.debug("%s has no identifier for chain %s", feed.provider, chain)
            return SourceDocument(state=PayloadState.ABSENT, detail="chain not mapped")
        directory = self._directories.get(address, {}).get(feed.provider, address)
        return feed.source.load(directory, key)

    def _normalize(
        self,
        feed: ProviderFeed,
        document: SourceDocument,
        context: NormalizationContext,
        address: str,
    ) -> NormalizedChainSnapshot:
        if document.state != PayloadState.PRESENT:
            return NormalizedChainSnapshot.empty()

        try:
            return feed.normalizer.normalize(document.document, context)
        except Exception:
            # One bad payload must not abort the pass
            logger.exception("Failed to normalize %s payload %s for %s", feed.provider, document.location, address)
            return NormalizedChainSnapshot.empty()
