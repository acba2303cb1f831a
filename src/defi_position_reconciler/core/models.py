"""Data models for canonical assets, protocol buckets, and chain snapshots."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer


class AssetRole(StrEnum):
    """Economic role of an asset inside a protocol position."""

    SUPPLY = "supply"
    BORROW = "borrow"
    REWARD = "reward"
    VESTING = "vesting"


class PayloadState(StrEnum):
    """Outcome of unwrapping a raw provider payload."""

    PRESENT = "present"
    EMPTY = "empty"
    ABSENT = "absent"
    MALFORMED = "malformed"


class PayloadResult(BaseModel):
    """
    Result of one parsing step at the provider boundary.

    Attributes
    ----------
    state : PayloadState
        Whether the payload was present, empty, absent, or malformed
    items : list[Any]
        Unwrapped records (empty unless state is PRESENT)
    detail : str | None
        Human readable reason for ABSENT/MALFORMED states

    """

    model_config = ConfigDict(frozen=True)

    state: PayloadState
    items: list[Any] = Field(default_factory=list)
    detail: str | None = None

    @classmethod
    def absent(cls, detail: str | None = None) -> "PayloadResult":
        return cls(state=PayloadState.ABSENT, detail=detail)

    @classmethod
    def malformed(cls, detail: str) -> "PayloadResult":
        return cls(state=PayloadState.MALFORMED, detail=detail)

    @classmethod
    def from_items(cls, items: list[Any]) -> "PayloadResult":
        if not items:
            return cls(state=PayloadState.EMPTY)
        return cls(state=PayloadState.PRESENT, items=items)

    @property
    def usable(self) -> bool:
        """True when the payload carries records to normalize."""
        return self.state == PayloadState.PRESENT


class CanonicalAsset(BaseModel):
    """
    Provider-independent asset entry.

    Attributes
    ----------
    symbol : str
        Token symbol, surrounding whitespace trimmed
    amount : float
        Token quantity
    price : float
        Unit price in USD
    value : float
        Signed USD value (liabilities negative)
    role : str
        An AssetRole value, or a provider type tag passed through unchanged
    flags : Any
        Opaque provider risk markers, omitted from output when absent

    """

    symbol: str
    amount: float = 0.0
    price: float = 0.0
    value: float = 0.0
    role: str
    flags: Any = None

    @model_serializer(mode="wrap")
    def serialize_without_missing_flags(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if data.get("flags") is None:
            data.pop("flags", None)
        return data


class NormalizedProtocol(BaseModel):
    """
    All positions of one protocol on one chain for one provider.

    Attributes
    ----------
    name : str
        Display name after alias resolution
    id : str
        DeBank protocol slug, or the display name when no slug exists
    value : float
        Signed USD value of the bucket
    assets : list[CanonicalAsset]
        Assets in the order they were reported

    """

    name: str
    id: str
    value: float = 0.0
    assets: list[CanonicalAsset] = Field(default_factory=list)

    def add(self, value: float, assets: list[CanonicalAsset]) -> None:
        self.value += value
        self.assets.extend(assets)


class NormalizedChainSnapshot(BaseModel):
    """
    One provider's normalized view of one address on one chain.

    Attributes
    ----------
    protocols : dict[str, NormalizedProtocol]
        Protocol buckets keyed by display name
    total_value : float
        Sum of all protocol values (serialized as ``totalValue``)

    """

    model_config = ConfigDict(populate_by_name=True)

    protocols: dict[str, NormalizedProtocol] = Field(default_factory=dict)
    total_value: float = Field(default=0.0, alias="totalValue")

    @classmethod
    def empty(cls) -> "NormalizedChainSnapshot":
        return cls()

    def bucket(self, name: str, protocol_id: str | None = None) -> NormalizedProtocol:
        """
        Get the bucket for a protocol, creating it on first use.

        Parameters
        ----------
        name : str
            Protocol display name
        protocol_id : str | None
            Stable slug; the display name is used when None

        Returns
        -------
        NormalizedProtocol
            Existing or newly created bucket

        """
        if name not in self.protocols:
            self.protocols[name] = NormalizedProtocol(name=name, id=protocol_id or name)
        return self.protocols[name]

    def record(self, bucket: NormalizedProtocol, value: float, assets: list[CanonicalAsset]) -> None:
        """Add a position's value and assets to a bucket and to the chain total."""
        bucket.add(value, assets)
        self.total_value += value

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ComparisonRecord(BaseModel):
    """
    Side-by-side snapshots of one address on one chain.

    Attributes
    ----------
    address : str
        Wallet address as stored on disk
    chain : str
        Canonical chain key
    snapshots : dict[str, NormalizedChainSnapshot]
        One snapshot per provider name (e.g. 'debank', 'zerion')

    """

    address: str
    chain: str
    snapshots: dict[str, NormalizedChainSnapshot]


class ComparisonDataset(BaseModel):
    """
    Output of a reconciliation pass.

    Attributes
    ----------
    records : list[ComparisonRecord]
        Records in address/chain iteration order
    addresses : list[str]
        Every processed address, including those without any chain data

    """

    records: list[ComparisonRecord] = Field(default_factory=list)
    addresses: list[str] = Field(default_factory=list)

    def get(self, address: str, chain: str) -> ComparisonRecord | None:
        for record in self.records:
            if record.address == address and record.chain == chain:
                return record
        return None

    def to_json_dict(self) -> dict[str, dict[str, dict[str, Any]]]:
        """
        Convert to the document layout read by the dashboard.

        Returns
        -------
        dict[str, dict[str, dict[str, Any]]]
            ``{address: {chain: {provider: snapshot}}}``

        """
        result: dict[str, dict[str, dict[str, Any]]] = {address: {} for address in self.addresses}
        for record in self.records:
            result.setdefault(record.address, {})[record.chain] = {
                provider: snapshot.to_json_dict() for provider, snapshot in record.snapshots.items()
            }
        return result


class SourceDocument(BaseModel):
    """
    A raw provider document as read from its resource.

    Attributes
    ----------
    state : PayloadState
        PRESENT when the resource was read and parsed, ABSENT when it does
        not exist, MALFORMED when it could not be parsed
    document : Any
        Parsed JSON document (None unless PRESENT)
    location : str
        Where the document was looked up
    detail : str | None
        Reason for ABSENT/MALFORMED states

    """

    model_config = ConfigDict(frozen=True)

    state: PayloadState
    document: Any = None
    location: str = ""
    detail: str | None = None
