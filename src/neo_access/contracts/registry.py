"""
Catalog of well-known Neo N3 contracts.

The catalog is built once into an immutable ``ContractRegistry``
(``DEFAULT_REGISTRY``) and injected into ContractService. Operation metadata
is descriptive: argument types drive marshalling, nothing more.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from neo_access.config import Network
from neo_access.errors import ContractError, ValidationError
from neo_access.utils.validation import validate_contract_name, validate_script_hash


@dataclass(frozen=True)
class ArgSpec:
    name: str
    type: str
    description: str = ""


@dataclass(frozen=True)
class OperationSpec:
    """
    One contract method.

    ``name`` is the on-chain method name; the key it is registered under
    in ``ContractDescriptor.operations`` may be a friendlier alias.
    """

    name: str
    description: str
    args: Tuple[ArgSpec, ...] = ()

    @property
    def arg_types(self) -> Tuple[str, ...]:
        return tuple(arg.type for arg in self.args)


@dataclass(frozen=True)
class ContractDescriptor:
    name: str
    description: str
    script_hash: Mapping[Network, str]
    operations: Mapping[str, OperationSpec] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "script_hash", MappingProxyType(dict(self.script_hash)))
        object.__setattr__(self, "operations", MappingProxyType(dict(self.operations)))

    def script_hash_for(self, network: Network) -> Optional[str]:
        """Canonical ``0x`` script hash on ``network``, or None if not deployed there."""
        raw = self.script_hash.get(Network(network))
        if not raw:
            return None
        return validate_script_hash(raw)

    def find_operation(self, operation: str) -> Optional[Tuple[str, OperationSpec]]:
        """
        Look up an operation by alias key or on-chain name.

        Exact matches win; otherwise the first case-insensitive match.
        """
        if operation in self.operations:
            return operation, self.operations[operation]
        for key, spec in self.operations.items():
            if spec.name == operation:
                return key, spec

        lowered = operation.lower()
        for key, spec in self.operations.items():
            if key.lower() == lowered or spec.name.lower() == lowered:
                return key, spec
        return None


class ContractRegistry:
    """
    Read-only, case-insensitive mapping of contract name to descriptor.

    Example:
        >>> registry = ContractRegistry(FAMOUS_CONTRACTS)
        >>> registry.get(" NeoBurger ") is registry.get("neoburger")
        True
    """

    def __init__(self, contracts: Mapping[str, ContractDescriptor]) -> None:
        entries: Dict[str, ContractDescriptor] = {}
        for key, descriptor in contracts.items():
            entries[validate_contract_name(key)] = descriptor
        self._contracts = MappingProxyType(entries)

    def get(self, name: str) -> ContractDescriptor:
        """
        Resolve a contract.

        Raises:
            ValidationError: If ``name`` is empty or not a string
            ContractError: If no contract is registered under ``name``
        """
        key = validate_contract_name(name)
        descriptor = self._contracts.get(key)
        if descriptor is None:
            raise ContractError(
                f"Contract {name.strip()} not found",
                code="CONTRACT_NOT_FOUND",
                details={"name": name, "available": sorted(self._contracts)},
            )
        return descriptor

    def contains(self, name: object) -> bool:
        """Never raises; malformed names are simply absent."""
        if not isinstance(name, str):
            return False
        try:
            self.get(name)
        except (ValidationError, ContractError):
            return False
        return True

    def names(self) -> List[str]:
        return list(self._contracts)

    def items(self) -> List[Tuple[str, ContractDescriptor]]:
        return list(self._contracts.items())

    def __contains__(self, name: object) -> bool:
        return self.contains(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._contracts)

    def __len__(self) -> int:
        return len(self._contracts)


# ============================================================================
# Catalog
# ============================================================================

def _op(name: str, description: str, *args: Tuple[str, str, str]) -> OperationSpec:
    return OperationSpec(
        name=name,
        description=description,
        args=tuple(ArgSpec(*arg) for arg in args),
    )


NEOFS = ContractDescriptor(
    name="NeoFS",
    description="Decentralized storage system on Neo N3 blockchain",
    script_hash={
        Network.MAINNET: "0x50ac1c37690cc2cfc594472833cf57505d5f46de",
        Network.TESTNET: "0xccca29443855a1c455d72a3318cf605debb9e384",
    },
    operations={
        "createContainer": _op(
            "createContainer",
            "Create a storage container",
            ("ownerId", "string", "Owner ID of the container"),
            ("rules", "array", "Container rules"),
        ),
        "deleteContainer": _op(
            "deleteContainer",
            "Delete a storage container",
            ("containerId", "string", "Container ID to delete"),
        ),
        "getContainers": _op(
            "getContainers",
            "Get containers owned by an address",
            ("ownerId", "string", "Owner ID to query containers for"),
        ),
    },
)

NEOBURGER = ContractDescriptor(
    name="NeoBurger",
    description="Neo N3 staking service",
    script_hash={Network.MAINNET: "0x48c40d4666f93408be1bef038b6722404d9a4c2a"},
    operations={
        "depositNeo": _op(
            "exchange",
            "Deposit NEO to receive bNEO tokens",
            ("account", "hash160", "Account receiving bNEO"),
        ),
        "withdrawNeo": _op(
            "exchange_to_neo",
            "Withdraw NEO by returning bNEO tokens",
            ("account", "hash160", "Account receiving NEO"),
            ("amount", "integer", "Amount of bNEO to exchange"),
        ),
        "balanceOf": _op(
            "balanceOf",
            "Get bNEO balance of an account",
            ("account", "hash160", "Account to check balance for"),
        ),
        "calculateGas": _op(
            "calculate_gas",
            "Calculate GAS rewards for an account",
            ("account", "hash160", "Account to calculate rewards for"),
        ),
        "claimGas": _op(
            "claim_gas",
            "Claim accumulated GAS rewards",
            ("account", "hash160", "Account claiming rewards"),
        ),
    },
)

FLAMINGO = ContractDescriptor(
    name="Flamingo",
    description="Neo N3 DeFi platform",
    script_hash={Network.MAINNET: "0xf970f4ccecd765b63732b821775dc38c25d74b39"},
    operations={
        "balanceOf": _op(
            "balanceOf",
            "Get FLM token balance",
            ("account", "hash160", "Account to check balance for"),
        ),
        "stake": _op(
            "stake",
            "Stake FLM tokens",
            ("account", "hash160", "Account staking tokens"),
            ("amount", "integer", "Amount to stake"),
        ),
        "unstake": _op(
            "unstake",
            "Unstake FLM tokens",
            ("account", "hash160", "Account unstaking tokens"),
            ("amount", "integer", "Amount to unstake"),
        ),
        "claimRewards": _op(
            "claimRewards",
            "Claim staking rewards",
            ("account", "hash160", "Account claiming rewards"),
        ),
    },
)

NEOCOMPOUND = ContractDescriptor(
    name="NeoCompound",
    description="Automatic yield farming protocol on Neo N3",
    script_hash={Network.MAINNET: "0xd6c41383808d22d7d1e40f8a741e20dc24b858e7"},
    operations={
        "deposit": _op(
            "deposit",
            "Deposit assets into NeoCompound",
            ("account", "hash160", "Account depositing assets"),
            ("assetId", "hash160", "Asset to deposit"),
            ("amount", "integer", "Amount to deposit"),
        ),
        "withdraw": _op(
            "withdraw",
            "Withdraw assets from NeoCompound",
            ("account", "hash160", "Account withdrawing assets"),
            ("assetId", "hash160", "Asset to withdraw"),
            ("amount", "integer", "Amount to withdraw"),
        ),
        "getBalance": _op(
            "getBalance",
            "Get balance of deposited assets",
            ("account", "hash160", "Account to check balance for"),
            ("assetId", "hash160", "Asset to check balance for"),
        ),
    },
)

GRANDSHARE = ContractDescriptor(
    name="GrandShare",
    description="Profit sharing protocol on Neo N3",
    script_hash={Network.MAINNET: "0xbbcb7a1e3defbeeafc18b3358a27ccb93d0b2b13"},
    operations={
        "deposit": _op(
            "deposit",
            "Deposit assets into GrandShare pool",
            ("account", "hash160", "Account depositing assets"),
            ("poolId", "integer", "ID of the pool to deposit into"),
            ("amount", "integer", "Amount to deposit"),
        ),
        "withdraw": _op(
            "withdraw",
            "Withdraw assets from GrandShare pool",
            ("account", "hash160", "Account withdrawing assets"),
            ("poolId", "integer", "ID of the pool to withdraw from"),
            ("amount", "integer", "Amount to withdraw"),
        ),
        "getPoolDetails": _op(
            "getPoolDetails",
            "Get details about a pool",
            ("poolId", "integer", "ID of the pool to query"),
        ),
    },
)

GHOSTMARKET = ContractDescriptor(
    name="GhostMarket",
    description="NFT marketplace on Neo N3",
    script_hash={Network.MAINNET: "0x7a8d62e32f1f4ed880f05e93d9b03d48e3b6add7"},
    operations={
        "createNFT": _op(
            "mintToken",
            "Create a new NFT",
            ("owner", "hash160", "Owner of the new NFT"),
            ("tokenURI", "string", "URI for token metadata"),
            ("properties", "array", "NFT properties"),
        ),
        "listNFT": _op(
            "listToken",
            "List an NFT for sale",
            ("tokenId", "integer", "ID of the token to list"),
            ("price", "integer", "Price of the token"),
            ("paymentToken", "hash160", "Token accepted as payment"),
        ),
        "buyNFT": _op(
            "buyToken",
            "Buy a listed NFT",
            ("tokenId", "integer", "ID of the token to buy"),
            ("buyer", "hash160", "Buyer of the token"),
        ),
        "getTokenInfo": _op(
            "getTokenInfo",
            "Get information about an NFT",
            ("tokenId", "integer", "ID of the token to query"),
        ),
    },
)

FAMOUS_CONTRACTS: Mapping[str, ContractDescriptor] = MappingProxyType(
    {
        "neofs": NEOFS,
        "neoburger": NEOBURGER,
        "flamingo": FLAMINGO,
        "neocompound": NEOCOMPOUND,
        "grandshare": GRANDSHARE,
        "ghostmarket": GHOSTMARKET,
    }
)

DEFAULT_REGISTRY = ContractRegistry(FAMOUS_CONTRACTS)
