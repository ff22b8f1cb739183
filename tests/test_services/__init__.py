"""
Service layer tests.

Tests cover:
- NeoService reads, writes and wallets (test_neo_service.py)
- Transaction status classification (test_transaction_status.py)
- Fee estimation (test_fee_estimator.py)
- Network selection and isolation (test_networks.py)
"""
