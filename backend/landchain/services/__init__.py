from landchain.services.chain import ChainClient, ChainError, get_chain_client, is_chain_address
from landchain.services.transfers import (
    register_land_record,
    verify_record,
    reject_record,
    set_status,
    request_transfer,
    approve_transfer,
    reject_transfer,
    TransferOutcome,
)

__all__ = [
    "ChainClient",
    "ChainError",
    "get_chain_client",
    "is_chain_address",
    "register_land_record",
    "verify_record",
    "reject_record",
    "set_status",
    "request_transfer",
    "approve_transfer",
    "reject_transfer",
    "TransferOutcome",
]
