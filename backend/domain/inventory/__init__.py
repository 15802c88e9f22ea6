"""
Inventory Domain - Stock snapshots and roll-ups.

Stock is tracked in three parallel ERP ledgers (Code1/2/3) whose
balances are summed into one total.
"""
