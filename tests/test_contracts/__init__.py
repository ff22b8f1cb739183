"""Contract registry and ContractService tests."""
