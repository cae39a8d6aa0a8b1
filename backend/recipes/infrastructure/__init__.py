"""Infrastructure — sessions and transactions, id allocation, schema version, logging."""
