"""Financial tracking -- commissions, income/expense transactions and revenue goals."""
