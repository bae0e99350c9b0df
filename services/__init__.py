"""Business services for the ambassador program and its commission ledger."""
