"""Service layer: NeoService facade, fee estimation, transaction status and tracking."""

from neo_access.services.fee_estimator import FeeEstimator, apply_safety_margin
from neo_access.services.neo_service import NeoService
from neo_access.services.transaction_status import TransactionStatusChecker
from neo_access.services.transaction_tracker import TransactionTracker

__all__ = [
    "NeoService",
    "FeeEstimator",
    "apply_safety_margin",
    "TransactionStatusChecker",
    "TransactionTracker",
]
