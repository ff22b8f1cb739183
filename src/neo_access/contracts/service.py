"""
ContractService: typed access to catalog contracts.

Resolves a contract by name, picks the script hash for the service's
network, marshals arguments by the operation's declared types and runs the
call through NeoService (so retry and rate limiting apply).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from neo_access.accounts import Account
from neo_access.config import Network
from neo_access.contracts.registry import (
    DEFAULT_REGISTRY,
    ContractDescriptor,
    ContractRegistry,
    OperationSpec,
)
from neo_access.errors import ContractError, ValidationError
from neo_access.models import TransactionResult
from neo_access.services.invocation import stack_integer
from neo_access.services.neo_service import NeoService
from neo_access.utils.logging import get_logger
from neo_access.utils.validation import (
    address_to_script_hash,
    validate_address,
    validate_integer,
    validate_script_hash,
)

_logger = get_logger(__name__)


class ContractService:
    """
    Query and invoke well-known contracts.

    Example:
        ```python
        contracts = ContractService(neo_service)
        result = await contracts.query_contract("NeoBurger", "balanceOf", [address])
        ```
    """

    def __init__(
        self,
        neo_service: NeoService,
        registry: ContractRegistry = DEFAULT_REGISTRY,
    ) -> None:
        self._neo = neo_service
        self._registry = registry

    @property
    def network(self) -> Network:
        return self._neo.network

    @property
    def registry(self) -> ContractRegistry:
        return self._registry

    def get_contract(self, name: str) -> ContractDescriptor:
        """
        Look up a contract by name (case-insensitive, whitespace-trimmed).

        Raises:
            ValidationError: If ``name`` is empty or not a string
            ContractError: If the contract is unknown
        """
        return self._registry.get(name)

    def get_contract_script_hash(self, name: str) -> str:
        """
        Script hash of ``name`` on this service's network.

        Raises:
            ContractError: If the contract is not deployed on the network
        """
        descriptor = self.get_contract(name)
        script_hash = descriptor.script_hash_for(self.network)
        if script_hash is None:
            raise ContractError(
                f"Contract {descriptor.name} is not available on {self.network.value}",
                code="CONTRACT_NOT_DEPLOYED",
                details={"contract": descriptor.name, "network": self.network.value},
            )
        return script_hash

    def _resolve(self, name: str, operation: str) -> Tuple[ContractDescriptor, str, OperationSpec]:
        descriptor = self.get_contract(name)
        script_hash = self.get_contract_script_hash(name)

        if not operation or not isinstance(operation, str) or not operation.strip():
            raise ValidationError("Operation must be a non-empty string")

        found = descriptor.find_operation(operation.strip())
        if found is None:
            raise ContractError(
                f"Operation {operation} not supported by {descriptor.name}",
                code="OPERATION_NOT_FOUND",
                details={
                    "contract": descriptor.name,
                    "operation": operation,
                    "available": list(descriptor.operations),
                },
            )
        return descriptor, script_hash, found[1]

    async def query_contract(
        self,
        name: str,
        operation: str,
        args: Sequence[Any] = (),
        client_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Read-only call. Returns the raw VM result.

        Raises:
            ContractError: Unknown contract/operation, or VM FAULT
        """
        descriptor, script_hash, spec = self._resolve(name, operation)
        _logger.debug(
            "Querying contract",
            extra={"contract": descriptor.name, "operation": spec.name},
        )
        return await self._neo.invoke_function(
            script_hash,
            spec.name,
            args,
            declared_types=spec.arg_types,
            client_id=client_id,
        )

    async def invoke_contract(
        self,
        account: Optional[Account],
        name: str,
        operation: str,
        args: Sequence[Any] = (),
        client_id: Optional[str] = None,
    ) -> TransactionResult:
        """
        Sign and broadcast a call.

        Raises:
            ValidationError: If ``account`` is missing (checked first)
        """
        if account is None:
            raise ValidationError("Account is required", code="ACCOUNT_REQUIRED")

        descriptor, script_hash, spec = self._resolve(name, operation)
        _logger.info(
            "Invoking contract",
            extra={
                "contract": descriptor.name,
                "operation": spec.name,
                "network": self.network.value,
            },
        )
        return await self._neo.invoke_contract(
            account,
            script_hash,
            spec.name,
            args,
            declared_types=spec.arg_types,
            client_id=client_id,
        )

    def list_supported_contracts(self) -> List[Dict[str, Any]]:
        """Name, description and availability of every catalog contract."""
        contracts = []
        for _, descriptor in self._registry.items():
            script_hash = descriptor.script_hash_for(self.network)
            contracts.append(
                {
                    "name": descriptor.name,
                    "description": descriptor.description,
                    "available": script_hash is not None,
                    "script_hash": script_hash,
                }
            )
        return contracts

    def get_contract_operations(self, name: str) -> Dict[str, Any]:
        descriptor = self.get_contract(name)
        return {
            "contract": descriptor.name,
            "network": self.network.value,
            "operations": {
                key: {
                    "name": spec.name,
                    "description": spec.description,
                    "args": [
                        {"name": arg.name, "type": arg.type, "description": arg.description}
                        for arg in spec.args
                    ],
                }
                for key, spec in descriptor.operations.items()
            },
        }

    def is_contract_available(self, name: object) -> bool:
        """True when ``name`` is known and deployed on this network. Never raises."""
        if not isinstance(name, str) or not self._registry.contains(name):
            return False
        return self._registry.get(name).script_hash_for(self.network) is not None

    async def get_token_balance(
        self,
        name: str,
        address: str,
        client_id: Optional[str] = None,
    ) -> int:
        """
        Raw ``balanceOf`` of ``address`` for a catalog token contract.

        Raises:
            ContractError: If the contract has no ``balanceOf`` operation
        """
        address = validate_address(address)
        result = await self.query_contract(
            name,
            "balanceOf",
            [address_to_script_hash(address)],
            client_id=client_id,
        )
        return stack_integer(result)

    # =========================================================================
    # Contract-specific operations
    # =========================================================================

    @staticmethod
    def _account_address(account: Optional[Account]) -> str:
        if account is None:
            raise ValidationError("Account is required", code="ACCOUNT_REQUIRED")
        return validate_address(account.address)

    @staticmethod
    def _sequence(value: Any, field_name: str) -> List[Any]:
        if not isinstance(value, (list, tuple)):
            raise ValidationError(
                f"{field_name} must be a list",
                details={"field": field_name, "value": repr(value)},
            )
        return list(value)

    async def create_neofs_container(
        self,
        account: Optional[Account],
        owner_id: str,
        rules: Sequence[Any],
    ) -> TransactionResult:
        self._account_address(account)
        return await self.invoke_contract(
            account, "neofs", "createContainer", [owner_id, self._sequence(rules, "rules")]
        )

    async def get_neofs_containers(
        self, owner_id: str, client_id: Optional[str] = None
    ) -> Dict[str, Any]:
        return await self.query_contract("neofs", "getContainers", [owner_id], client_id)

    async def deposit_neo_to_neoburger(self, account: Optional[Account]) -> TransactionResult:
        """Exchange NEO for bNEO."""
        address = self._account_address(account)
        return await self.invoke_contract(account, "neoburger", "depositNeo", [address])

    async def withdraw_neo_from_neoburger(
        self,
        account: Optional[Account],
        amount: Union[int, str],
    ) -> TransactionResult:
        """Exchange ``amount`` bNEO (raw integer units) back to NEO."""
        address = self._account_address(account)
        amount = validate_integer(amount, "amount", minimum=1)
        return await self.invoke_contract(account, "neoburger", "withdrawNeo", [address, amount])

    async def claim_neoburger_gas(self, account: Optional[Account]) -> TransactionResult:
        address = self._account_address(account)
        return await self.invoke_contract(account, "neoburger", "claimGas", [address])

    async def get_neoburger_balance(self, address: str, client_id: Optional[str] = None) -> int:
        return await self.get_token_balance("neoburger", address, client_id)

    async def stake_flamingo(
        self,
        account: Optional[Account],
        amount: Union[int, str],
    ) -> TransactionResult:
        address = self._account_address(account)
        amount = validate_integer(amount, "amount", minimum=1)
        return await self.invoke_contract(account, "flamingo", "stake", [address, amount])

    async def unstake_flamingo(
        self,
        account: Optional[Account],
        amount: Union[int, str],
    ) -> TransactionResult:
        address = self._account_address(account)
        amount = validate_integer(amount, "amount", minimum=1)
        return await self.invoke_contract(account, "flamingo", "unstake", [address, amount])

    async def get_flamingo_balance(self, address: str, client_id: Optional[str] = None) -> int:
        return await self.get_token_balance("flamingo", address, client_id)

    async def deposit_to_neocompound(
        self,
        account: Optional[Account],
        asset_id: str,
        amount: Union[int, str],
    ) -> TransactionResult:
        address = self._account_address(account)
        asset_id = validate_script_hash(asset_id, field_name="asset_id")
        amount = validate_integer(amount, "amount", minimum=1)
        return await self.invoke_contract(
            account, "neocompound", "deposit", [address, asset_id, amount]
        )

    async def withdraw_from_neocompound(
        self,
        account: Optional[Account],
        asset_id: str,
        amount: Union[int, str],
    ) -> TransactionResult:
        address = self._account_address(account)
        asset_id = validate_script_hash(asset_id, field_name="asset_id")
        amount = validate_integer(amount, "amount", minimum=1)
        return await self.invoke_contract(
            account, "neocompound", "withdraw", [address, asset_id, amount]
        )

    async def get_neocompound_balance(
        self,
        address: str,
        asset_id: str,
        client_id: Optional[str] = None,
    ) -> int:
        """Deposited balance of ``asset_id`` for ``address``."""
        address = validate_address(address)
        asset_id = validate_script_hash(asset_id, field_name="asset_id")
        result = await self.query_contract(
            "neocompound", "getBalance", [address, asset_id], client_id
        )
        return stack_integer(result)

    async def deposit_to_grandshare(
        self,
        account: Optional[Account],
        pool_id: Union[int, str],
        amount: Union[int, str],
    ) -> TransactionResult:
        address = self._account_address(account)
        pool_id = validate_integer(pool_id, "pool_id")
        amount = validate_integer(amount, "amount", minimum=1)
        return await self.invoke_contract(
            account, "grandshare", "deposit", [address, pool_id, amount]
        )

    async def withdraw_from_grandshare(
        self,
        account: Optional[Account],
        pool_id: Union[int, str],
        amount: Union[int, str],
    ) -> TransactionResult:
        address = self._account_address(account)
        pool_id = validate_integer(pool_id, "pool_id")
        amount = validate_integer(amount, "amount", minimum=1)
        return await self.invoke_contract(
            account, "grandshare", "withdraw", [address, pool_id, amount]
        )

    async def get_grandshare_pool_details(
        self, pool_id: Union[int, str], client_id: Optional[str] = None
    ) -> Dict[str, Any]:
        pool_id = validate_integer(pool_id, "pool_id")
        return await self.query_contract("grandshare", "getPoolDetails", [pool_id], client_id)

    async def create_ghostmarket_nft(
        self,
        account: Optional[Account],
        token_uri: str,
        properties: Sequence[Any] = (),
    ) -> TransactionResult:
        """Mint an NFT owned by ``account``."""
        address = self._account_address(account)
        if not isinstance(token_uri, str) or not token_uri.strip():
            raise ValidationError("Token URI must be a non-empty string")
        return await self.invoke_contract(
            account,
            "ghostmarket",
            "createNFT",
            [address, token_uri, self._sequence(properties, "properties")],
        )

    async def list_ghostmarket_nft(
        self,
        account: Optional[Account],
        token_id: Union[int, str],
        price: Union[int, str],
        payment_token: str,
    ) -> TransactionResult:
        """List ``token_id`` for sale at ``price`` raw units of ``payment_token``."""
        self._account_address(account)
        token_id = validate_integer(token_id, "token_id")
        price = validate_integer(price, "price", minimum=1)
        payment_token = validate_script_hash(payment_token, field_name="payment_token")
        return await self.invoke_contract(
            account, "ghostmarket", "listNFT", [token_id, price, payment_token]
        )

    async def buy_ghostmarket_nft(
        self,
        account: Optional[Account],
        token_id: Union[int, str],
    ) -> TransactionResult:
        address = self._account_address(account)
        token_id = validate_integer(token_id, "token_id")
        return await self.invoke_contract(account, "ghostmarket", "buyNFT", [token_id, address])

    async def get_ghostmarket_token_info(
        self, token_id: Union[int, str], client_id: Optional[str] = None
    ) -> Dict[str, Any]:
        token_id = validate_integer(token_id, "token_id")
        return await self.query_contract("ghostmarket", "getTokenInfo", [token_id], client_id)
