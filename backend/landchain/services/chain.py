"""
Blockchain client for recording land transfers.

Wraps the LandRegistry contract's ``transferLand(tokenId, to)`` call via
web3. The client is optional: without an RPC URL, contract address and
admin signing key it reports ``is_configured = False`` and the transfer
workflow falls back to a placeholder transaction hash (unless
CHAIN_REQUIRED is set).
"""

import logging
import re
import secrets
from functools import lru_cache
from typing import Optional

from web3 import Web3
from web3.exceptions import Web3Exception

from landchain.core.config import settings

logger = logging.getLogger(__name__)

# Only the function the backend calls; the full ABI lives with the contract.
LAND_REGISTRY_ABI = [
    {
        "name": "transferLand",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "tokenId", "type": "uint256"},
            {"name": "to", "type": "address"},
        ],
        "outputs": [],
    }
]

_PRIVATE_KEY_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


class ChainError(Exception):
    """Raised when a transfer cannot be recorded on-chain."""
    pass


def is_chain_address(value) -> bool:
    """True for a well-formed 0x-prefixed 20-byte address (checksum enforced on mixed case)."""
    if not isinstance(value, str) or not value.startswith("0x"):
        return False
    return Web3.is_address(value)


def synthesize_tx_hash() -> str:
    """Placeholder transaction reference: 0x followed by 64 random hex chars."""
    return "0x" + secrets.token_hex(32)


def normalize_private_key(key: str) -> str:
    """Add the 0x prefix if missing and check the key is 32 bytes of hex."""
    key = key.strip()
    if not key.startswith("0x"):
        key = "0x" + key
    if not _PRIVATE_KEY_RE.match(key):
        raise ChainError("Admin private key is invalid format (should be 64 hex chars with optional 0x prefix)")
    return key


class ChainClient:
    """Submits land transfers to the LandRegistry contract."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        contract_address: Optional[str] = None,
        private_key: Optional[str] = None,
        tx_timeout: int = 120,
    ):
        self.rpc_url = rpc_url
        self.contract_address = contract_address
        self._private_key = private_key
        self.tx_timeout = tx_timeout
        self._w3 = None

    @classmethod
    def from_settings(cls, config=settings) -> "ChainClient":
        return cls(
            rpc_url=config.CHAIN_RPC_URL,
            contract_address=config.CHAIN_CONTRACT_ADDRESS,
            private_key=config.CHAIN_ADMIN_PRIVATE_KEY,
            tx_timeout=config.CHAIN_TX_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.rpc_url and self.contract_address and self._private_key)

    def _web3(self) -> Web3:
        if self._w3 is None:
            self._w3 = Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": 30}))
        return self._w3

    def submit_transfer(self, token_id: int, new_owner_address: str) -> str:
        """
        Record a transfer on-chain and wait for it to be mined.

        Args:
            token_id: Land token id on the registry contract
            new_owner_address: Recipient wallet address

        Returns:
            Transaction hash as a 0x-prefixed hex string.

        Raises:
            ChainError: client not configured, bad key, RPC failure or reverted transaction.
        """
        if not self.is_configured:
            raise ChainError("Blockchain client is not configured")

        key = normalize_private_key(self._private_key)

        try:
            w3 = self._web3()
            account = w3.eth.account.from_key(key)
            logger.info(f"Submitting transfer of token {token_id} to {new_owner_address} from {account.address}")

            contract = w3.eth.contract(
                address=Web3.to_checksum_address(self.contract_address),
                abi=LAND_REGISTRY_ABI,
            )
            tx = contract.functions.transferLand(
                int(token_id),
                Web3.to_checksum_address(new_owner_address),
            ).build_transaction({
                "from": account.address,
                "nonce": w3.eth.get_transaction_count(account.address),
            })

            signed = account.sign_transaction(tx)
            tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
        except (Web3Exception, ValueError, OSError) as e:
            raise ChainError(f"Failed to submit transfer: {e}") from e

        if receipt.get("status") != 1:
            raise ChainError(f"Transfer transaction {Web3.to_hex(tx_hash)} reverted")

        return Web3.to_hex(tx_hash)


@lru_cache
def get_chain_client() -> ChainClient:
    """Dependency returning the process-wide chain client."""
    client = ChainClient.from_settings()
    if not client.is_configured:
        logger.warning("Blockchain configuration incomplete; transfers will use placeholder hashes")
    return client
