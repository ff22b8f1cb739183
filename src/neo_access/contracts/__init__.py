"""Well-known contract catalog and the service that invokes it."""

from neo_access.contracts.registry import (
    DEFAULT_REGISTRY,
    FAMOUS_CONTRACTS,
    ArgSpec,
    ContractDescriptor,
    ContractRegistry,
    OperationSpec,
)
from neo_access.contracts.service import ContractService

__all__ = [
    "ArgSpec",
    "OperationSpec",
    "ContractDescriptor",
    "ContractRegistry",
    "FAMOUS_CONTRACTS",
    "DEFAULT_REGISTRY",
    "ContractService",
]
