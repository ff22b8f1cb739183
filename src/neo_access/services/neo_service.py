"""
NeoService: resilient access to one Neo N3 network.

Every node read follows the same path:

    validate input -> cache check -> rate-limit admission
        -> node call with retry -> result shape check -> cache write

Writes (transfers, invocations, GAS claims) dry-run the invocation first,
build an UnsignedTransaction, hand it to the caller's account for signing
and broadcast the result. Writes and fee estimates are never cached.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from neo_access.accounts import Account, AccountBackend, UnsignedTransaction, WalletAccount
from neo_access.config import Network, NetworkConfig, get_network_config
from neo_access.constants import (
    DEFAULT_CACHE_TTL_MS,
    DEFAULT_RATE_LIMIT_KEY,
    MAX_TRANSFER_AMOUNT,
    NATIVE_ASSETS,
    NEO_HASH,
    RPC_TIMEOUT_SECONDS,
    VALID_UNTIL_BLOCK_INCREMENT,
)
from neo_access.errors import (
    NeoAccessError,
    NetworkError,
    RpcResponseError,
    TransactionError,
    ValidationError,
    WalletError,
)
from neo_access.models import (
    BlockchainInfo,
    FeeEstimate,
    TrackedTransaction,
    TransactionResult,
    TransactionStatus,
    WalletRecord,
)
from neo_access.rpc.client import LedgerClient, NeoRpcClient
from neo_access.rpc.params import ContractParam, ParamType, marshal_args
from neo_access.services.fee_estimator import FeeEstimator, nep17_transfer_params
from neo_access.services.invocation import (
    call_node,
    dry_run,
    fractions_to_gas,
    gas_consumed,
    signer_for,
    stack_integer,
)
from neo_access.services.transaction_status import TransactionStatusChecker
from neo_access.services.transaction_tracker import TransactionTracker
from neo_access.utils.cache import TTLCache
from neo_access.utils.logging import get_logger
from neo_access.utils.rate_limiter import RateLimiter
from neo_access.utils.retry import RetryConfig
from neo_access.utils.validation import (
    AmountInput,
    BlockIdentifier,
    address_to_script_hash,
    amount_to_fractions,
    parse_block_identifier,
    validate_address,
    validate_amount,
    validate_hash,
    validate_network,
    validate_password,
    validate_script_hash,
)

_logger = get_logger(__name__)

DeclaredTypes = Optional[Sequence[Union[str, ParamType]]]


def _require_account(account: Optional[Account]) -> Account:
    if account is None:
        raise ValidationError("Account is required", code="ACCOUNT_REQUIRED")
    return account


def _validate_operation(operation: str) -> str:
    if not operation or not isinstance(operation, str) or not operation.strip():
        raise ValidationError("Operation must be a non-empty string")
    return operation.strip()


def _is_nep2(key: str) -> bool:
    return key.startswith("6P") and len(key) == 58


def _is_private_key_hex(key: str) -> bool:
    clean = key[2:] if key.lower().startswith("0x") else key
    if len(clean) != 64:
        return False
    try:
        bytes.fromhex(clean)
    except ValueError:
        return False
    return True


class NeoService:
    """
    Access layer for a single network.

    Each instance owns its own cache and rate limiter, so mainnet and
    testnet services never share state.

    Example:
        ```python
        service = NeoService("https://testnet1.neo.coz.io:443", Network.TESTNET)
        info = await service.get_blockchain_info()
        balance = await service.get_balance("NZNovk...")
        await service.aclose()
        ```
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        network: Union[Network, str] = Network.MAINNET,
        *,
        client: Optional[LedgerClient] = None,
        cache: Optional[TTLCache[Any]] = None,
        rate_limiter: Optional[RateLimiter] = None,
        retry_config: Optional[RetryConfig] = None,
        max_amount: Decimal = MAX_TRANSFER_AMOUNT,
        account_backend: Optional[AccountBackend] = None,
        timeout: float = RPC_TIMEOUT_SECONDS,
        valid_until_increment: int = VALID_UNTIL_BLOCK_INCREMENT,
    ) -> None:
        """
        Create the service.

        Args:
            rpc_url: Node endpoint; required unless ``client`` is given
            network: Network this service talks to
            client: Ledger client to use instead of building one
            cache: Cache for idempotent reads (default: 30 s TTL)
            rate_limiter: Admission control; None disables it
            retry_config: Retry policy for node calls
            max_amount: Upper bound for transfer amounts
            account_backend: Key management for create/import wallet
            timeout: Transport timeout in seconds
            valid_until_increment: Blocks a built transaction stays valid

        Raises:
            NetworkError: If the RPC URL is empty or the client cannot be built
        """
        self._network = validate_network(network)

        if client is None:
            if not rpc_url:
                raise NetworkError("RPC URL is required", code="INVALID_RPC_URL")
            client = NeoRpcClient(rpc_url, timeout=timeout)

        self._client = client
        self._network_config: NetworkConfig = get_network_config(self._network, rpc_url)
        self._cache: TTLCache[Any] = cache or TTLCache(
            f"neo:{self._network.value}", ttl_ms=DEFAULT_CACHE_TTL_MS
        )
        self._rate_limiter = rate_limiter
        self._retry_config = retry_config or RetryConfig()
        self._max_amount = Decimal(max_amount)
        self._account_backend = account_backend
        self._valid_until_increment = valid_until_increment

        self._fees = FeeEstimator(self._client, self._network, self._retry_config)
        self._tx_status = TransactionStatusChecker(
            self._client, self._network, self._retry_config
        )
        self._tracker = TransactionTracker(self._tx_status, self._network)

        _logger.info(
            "NeoService initialized",
            extra={
                "network": self._network.value,
                "rpc_url": self._network_config.rpc_url,
                "rate_limiting": rate_limiter is not None and rate_limiter.enabled,
            },
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def network(self) -> Network:
        return self._network

    @property
    def network_config(self) -> NetworkConfig:
        return self._network_config

    @property
    def client(self) -> LedgerClient:
        return self._client

    @property
    def cache(self) -> TTLCache[Any]:
        return self._cache

    @property
    def rate_limiter(self) -> Optional[RateLimiter]:
        return self._rate_limiter

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry_config

    @property
    def transaction_tracker(self) -> TransactionTracker:
        """Transactions followed on this network; see ``track_transaction``."""
        return self._tracker

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "NeoService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _admit(self, client_id: Optional[str]) -> None:
        if self._rate_limiter is not None:
            self._rate_limiter.check_limit(client_id or DEFAULT_RATE_LIMIT_KEY)

    async def _block_count(self) -> int:
        count = await call_node("getblockcount", self._client.get_block_count, self._retry_config)
        if count is None or isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise NetworkError(
                "Node returned an empty or invalid block height",
                code="EMPTY_RESPONSE",
                details={"method": "getblockcount", "result": count},
            )
        return count

    def _resolve_asset(self, asset: str) -> Tuple[str, Optional[int]]:
        if not asset or not isinstance(asset, str):
            raise ValidationError("Asset must be NEO, GAS or a script hash")
        native = NATIVE_ASSETS.get(asset.strip().upper())
        if native is not None:
            return native
        return validate_script_hash(asset.strip(), field_name="asset"), None

    async def _asset_decimals(self, asset_hash: str) -> int:
        key = f"decimals:{asset_hash}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = await dry_run(
            self._client, asset_hash, "decimals", retry_config=self._retry_config
        )
        decimals = stack_integer(result)
        self._cache.set(key, decimals)
        return decimals

    async def _transfer_fractions(
        self,
        asset: str,
        amount: AmountInput,
    ) -> Tuple[str, int]:
        amount_str = validate_amount(amount, max_amount=self._max_amount)
        asset_hash, decimals = self._resolve_asset(asset)
        if decimals is None:
            decimals = await self._asset_decimals(asset_hash)
        return asset_hash, amount_to_fractions(amount_str, decimals)

    def _sign(self, account: Account, unsigned: UnsignedTransaction) -> str:
        try:
            signed = account.sign_transaction(unsigned)
        except NeoAccessError:
            raise
        except Exception as e:
            raise WalletError(
                f"Failed to sign transaction: {e}",
                code="SIGNING_FAILED",
                details={"address": account.address},
            ) from e

        if not signed or not isinstance(signed, str):
            raise WalletError(
                "Account returned an empty signed transaction",
                code="SIGNING_FAILED",
                details={"address": account.address},
            )
        return signed

    async def _submit(
        self,
        account: Account,
        script_hash: str,
        operation: str,
        params: Sequence[ContractParam],
    ) -> TransactionResult:
        sender = address_to_script_hash(account.address)
        signers = (signer_for(sender),)

        result = await dry_run(
            self._client,
            script_hash,
            operation,
            params,
            signers,
            retry_config=self._retry_config,
        )
        script = result.get("script")
        if not script or not isinstance(script, str):
            raise NetworkError(
                "Invocation result has no script",
                code="MALFORMED_RESPONSE",
                details={"script_hash": script_hash, "operation": operation},
            )

        system_fee = gas_consumed(result)
        height = await self._block_count()
        unsigned = UnsignedTransaction(
            script=script,
            signers=signers,
            system_fee=system_fee,
            valid_until_block=height + self._valid_until_increment,
            network_magic=self._network_config.magic,
        )
        signed = self._sign(account, unsigned)

        try:
            sent = await call_node(
                "sendrawtransaction",
                lambda: self._client.send_raw_transaction(signed),
                self._retry_config,
            )
        except RpcResponseError as e:
            raise TransactionError(
                f"Transaction rejected: {e.message}",
                code="TX_REJECTED",
                details={"rpc_code": e.rpc_code, "operation": operation},
            ) from e

        txid = sent.get("hash") if isinstance(sent, dict) else None
        if not txid:
            raise NetworkError(
                "Broadcast returned no transaction hash",
                code="MALFORMED_RESPONSE",
                details={"method": "sendrawtransaction"},
            )
        txid = validate_hash(txid, field_name="txid")

        _logger.info(
            "Transaction broadcast",
            extra={
                "txid": txid,
                "network": self._network.value,
                "script_hash": script_hash,
                "operation": operation,
                "sender": account.address,
            },
        )
        return TransactionResult(
            txid=txid,
            network=self._network,
            sender=account.address,
            system_fee=format(fractions_to_gas(system_fee), "f"),
            valid_until_block=unsigned.valid_until_block,
        )

    def _wallet_record(self, account: WalletAccount, password: Optional[str]) -> WalletRecord:
        try:
            if password is not None:
                return WalletRecord(
                    address=account.address,
                    public_key=account.public_key,
                    encrypted_private_key=account.encrypt(password),
                )
            return WalletRecord(
                address=account.address,
                public_key=account.public_key,
                wif=account.wif,
            )
        except NeoAccessError:
            raise
        except Exception as e:
            raise WalletError(f"Failed to export wallet: {e}", code="WALLET_EXPORT_FAILED") from e

    def _backend(self) -> AccountBackend:
        if self._account_backend is None:
            raise WalletError(
                "No account backend configured",
                code="NO_ACCOUNT_BACKEND",
            )
        return self._account_backend

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_block_count(self, client_id: Optional[str] = None) -> int:
        """Current block count (height of the next block)."""
        self._admit(client_id)
        return await self._block_count()

    async def get_blockchain_info(self, client_id: Optional[str] = None) -> BlockchainInfo:
        """
        Height and next validator set. Cached.

        Raises:
            NetworkError: If either call fails or the height is empty
        """
        key = "blockchain_info"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        self._admit(client_id)
        height = await self._block_count()
        validators = await call_node(
            "getnextblockvalidators",
            self._client.get_next_block_validators,
            self._retry_config,
        )
        if not isinstance(validators, list):
            raise NetworkError(
                "Node returned a malformed validator list",
                code="MALFORMED_RESPONSE",
                details={"method": "getnextblockvalidators"},
            )

        info = BlockchainInfo(height=height, validators=validators, network=self._network)
        self._cache.set(key, info)
        return info

    async def get_block(
        self,
        hash_or_height: BlockIdentifier,
        client_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Verbose block by height or hash.

        Lookups by height are cached; lookups by hash are not.

        Raises:
            ValidationError: If the identifier is neither a height nor a hash
        """
        block_id = parse_block_identifier(hash_or_height)
        key = f"block:{block_id}" if isinstance(block_id, int) else None

        if key is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        self._admit(client_id)
        block = await call_node(
            "getblock",
            lambda: self._client.get_block(block_id, True),
            self._retry_config,
        )
        if not isinstance(block, dict) or "hash" not in block:
            raise NetworkError(
                f"Node returned a malformed block for {block_id}",
                code="MALFORMED_RESPONSE",
                details={"method": "getblock", "block": block_id},
            )

        if key is not None:
            self._cache.set(key, block)
        return block

    async def get_transaction(self, txid: str, client_id: Optional[str] = None) -> Dict[str, Any]:
        """Verbose transaction record."""
        txid = validate_hash(txid, field_name="txid")
        self._admit(client_id)
        tx = await call_node(
            "getrawtransaction",
            lambda: self._client.get_raw_transaction(txid, True),
            self._retry_config,
        )
        if not isinstance(tx, dict) or "hash" not in tx:
            raise NetworkError(
                f"Node returned a malformed transaction for {txid}",
                code="MALFORMED_RESPONSE",
                details={"method": "getrawtransaction", "txid": txid},
            )
        return tx

    async def get_balance(self, address: str, client_id: Optional[str] = None) -> Dict[str, Any]:
        """
        NEP-17 balances of ``address``. Cached.

        Returns:
            ``{"address": ..., "balance": [{"assethash", "amount", "lastupdatedblock"}]}``
        """
        address = validate_address(address)
        key = f"balance:{address}"
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        self._admit(client_id)
        balances = await call_node(
            "getnep17balances",
            lambda: self._client.get_nep17_balances(address),
            self._retry_config,
        )
        if not isinstance(balances, dict) or not isinstance(balances.get("balance"), list):
            raise NetworkError(
                f"Node returned malformed balances for {address}",
                code="MALFORMED_RESPONSE",
                details={"method": "getnep17balances", "address": address},
            )

        self._cache.set(key, balances)
        return balances

    async def get_node_version(self, client_id: Optional[str] = None) -> Dict[str, Any]:
        """Node software and protocol settings (``getversion``)."""
        self._admit(client_id)
        version = await call_node("getversion", self._client.get_version, self._retry_config)
        if not isinstance(version, dict):
            raise NetworkError(
                "Node returned a malformed version",
                code="MALFORMED_RESPONSE",
                details={"method": "getversion"},
            )
        return version

    async def invoke_function(
        self,
        script_hash: str,
        operation: str,
        args: Sequence[Any] = (),
        signers: Optional[Sequence[Dict[str, Any]]] = None,
        *,
        declared_types: DeclaredTypes = None,
        client_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Read-only dry run of ``operation``.

        Returns:
            The raw VM result (``state``, ``gasconsumed``, ``stack``, ...)

        Raises:
            ContractError: If the VM faults
        """
        script_hash = validate_script_hash(script_hash)
        operation = _validate_operation(operation)
        params = marshal_args(args, declared_types)
        self._admit(client_id)
        return await dry_run(
            self._client,
            script_hash,
            operation,
            params,
            signers or (),
            retry_config=self._retry_config,
        )

    # =========================================================================
    # Writes
    # =========================================================================

    async def transfer_assets(
        self,
        account: Optional[Account],
        to_address: str,
        asset: str,
        amount: AmountInput,
        client_id: Optional[str] = None,
    ) -> TransactionResult:
        """
        Transfer NEO, GAS or any NEP-17 token.

        Args:
            account: Signing account (sender)
            to_address: Recipient address
            asset: "NEO", "GAS" or a token script hash
            amount: Amount in whole tokens

        Raises:
            ValidationError: Missing account, bad address/asset/amount
            ContractError: If the transfer faults in the dry run
            WalletError: If signing fails
            TransactionError: If the node rejects the broadcast
        """
        account = _require_account(account)
        validate_address(account.address, "from_address")
        to_address = validate_address(to_address, "to_address")
        validate_amount(amount, max_amount=self._max_amount)
        self._resolve_asset(asset)

        self._admit(client_id)
        asset_hash, fractions = await self._transfer_fractions(asset, amount)
        params = nep17_transfer_params(
            address_to_script_hash(account.address),
            address_to_script_hash(to_address),
            fractions,
        )
        return await self._submit(account, asset_hash, "transfer", params)

    async def invoke_contract(
        self,
        account: Optional[Account],
        script_hash: str,
        operation: str,
        args: Sequence[Any] = (),
        *,
        declared_types: DeclaredTypes = None,
        client_id: Optional[str] = None,
    ) -> TransactionResult:
        """Sign and broadcast a call to ``operation`` on ``script_hash``."""
        account = _require_account(account)
        validate_address(account.address, "from_address")
        script_hash = validate_script_hash(script_hash)
        operation = _validate_operation(operation)
        params = marshal_args(args, declared_types)

        self._admit(client_id)
        return await self._submit(account, script_hash, operation, params)

    async def claim_gas(
        self,
        account: Optional[Account],
        client_id: Optional[str] = None,
    ) -> TransactionResult:
        """
        Claim unclaimed GAS.

        N3 distributes GAS when a NEO balance changes, so the claim is a
        zero-amount NEO transfer from the account to itself.
        """
        account = _require_account(account)
        address = validate_address(account.address, "from_address")
        sender = address_to_script_hash(address)

        self._admit(client_id)
        return await self._submit(
            account, NEO_HASH, "transfer", nep17_transfer_params(sender, sender, 0)
        )

    # =========================================================================
    # Wallets
    # =========================================================================

    def create_wallet(self, password: str) -> WalletRecord:
        """
        Generate a new account and return its NEP-2 encrypted key.

        Raises:
            ValidationError: If the password is too short or too long
            WalletError: If key generation or encryption fails
        """
        password = validate_password(password)
        backend = self._backend()
        try:
            account = backend.create()
        except NeoAccessError:
            raise
        except Exception as e:
            raise WalletError(f"Failed to create wallet: {e}", code="WALLET_CREATE_FAILED") from e

        record = self._wallet_record(account, password)
        _logger.info("Wallet created", extra={"address": record.address})
        return record

    def import_wallet(self, key: str, password: Optional[str] = None) -> WalletRecord:
        """
        Import a WIF, a 64-hex private key or a NEP-2 encrypted key.

        With ``password`` the returned record holds only the encrypted key;
        without it, the WIF.

        Raises:
            ValidationError: Empty key, bad password, NEP-2 without password
            WalletError: If the key cannot be decoded or decrypted
        """
        if not key or not isinstance(key, str) or not key.strip():
            raise ValidationError("Key must be a non-empty string")
        key = key.strip()
        if password is not None:
            password = validate_password(password)

        backend = self._backend()
        try:
            if _is_nep2(key):
                if password is None:
                    raise ValidationError(
                        "Password is required to import an encrypted key",
                        code="PASSWORD_REQUIRED",
                    )
                account = backend.decrypt(key, password)
            elif _is_private_key_hex(key):
                account = backend.from_private_key(key[2:] if key.lower().startswith("0x") else key)
            else:
                account = backend.from_wif(key)
        except NeoAccessError:
            raise
        except Exception as e:
            raise WalletError(f"Failed to import wallet: {e}", code="WALLET_IMPORT_FAILED") from e

        record = self._wallet_record(account, password)
        _logger.info("Wallet imported", extra={"address": record.address})
        return record

    # =========================================================================
    # Fees and Transaction Status
    # =========================================================================

    async def estimate_transfer_fees(
        self,
        from_address: str,
        to_address: str,
        asset: str,
        amount: AmountInput,
        client_id: Optional[str] = None,
    ) -> FeeEstimate:
        """Fee estimate for a transfer. Never cached."""
        from_address = validate_address(from_address, "from_address")
        to_address = validate_address(to_address, "to_address")
        validate_amount(amount, max_amount=self._max_amount)
        self._resolve_asset(asset)

        self._admit(client_id)
        asset_hash, fractions = await self._transfer_fractions(asset, amount)
        return await self._fees.estimate_transfer(
            address_to_script_hash(from_address),
            address_to_script_hash(to_address),
            asset_hash,
            fractions,
        )

    async def estimate_invoke_fees(
        self,
        from_address: str,
        script_hash: str,
        operation: str,
        args: Sequence[Any] = (),
        *,
        declared_types: DeclaredTypes = None,
        client_id: Optional[str] = None,
    ) -> FeeEstimate:
        """Fee estimate for a contract call. Never cached."""
        from_address = validate_address(from_address, "from_address")
        script_hash = validate_script_hash(script_hash)
        operation = _validate_operation(operation)
        params: List[ContractParam] = marshal_args(args, declared_types)

        self._admit(client_id)
        return await self._fees.estimate_invoke(
            address_to_script_hash(from_address),
            script_hash,
            operation,
            params,
        )

    async def check_transaction_status(
        self,
        txid: str,
        client_id: Optional[str] = None,
    ) -> TransactionStatus:
        """Classify ``txid`` as not_found, pending or confirmed."""
        txid = validate_hash(txid, field_name="txid")
        self._admit(client_id)
        return await self._tx_status.check(txid)

    async def wait_for_confirmation(
        self,
        txid: str,
        poll_interval_s: float = 15.0,
        max_polls: int = 20,
        client_id: Optional[str] = None,
    ) -> TransactionStatus:
        """Poll ``txid`` until it is confirmed or the poll budget is spent."""
        txid = validate_hash(txid, field_name="txid")
        self._admit(client_id)
        return await self._tx_status.wait_for_confirmation(txid, poll_interval_s, max_polls)

    def track_transaction(self, txid: str) -> TrackedTransaction:
        """Start following ``txid``; ``refresh_tracked_transactions`` polls it."""
        return self._tracker.track(txid)

    async def refresh_tracked_transactions(
        self,
        client_id: Optional[str] = None,
    ) -> List[TrackedTransaction]:
        """Re-check every pending tracked transaction. Admitted as one operation."""
        self._admit(client_id)
        return await self._tracker.refresh()
