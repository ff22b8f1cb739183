"""JSON-RPC transport and contract parameter marshalling."""

from neo_access.rpc.client import LedgerClient, NeoRpcClient
from neo_access.rpc.params import (
    ContractParam,
    ParamType,
    infer_param_type,
    marshal_args,
    marshal_param,
    parse_param_type,
)

__all__ = [
    "LedgerClient",
    "NeoRpcClient",
    "ContractParam",
    "ParamType",
    "infer_param_type",
    "marshal_args",
    "marshal_param",
    "parse_param_type",
]
