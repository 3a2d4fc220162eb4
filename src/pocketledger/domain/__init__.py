"""Domain records, the transaction type table and repository protocols."""
