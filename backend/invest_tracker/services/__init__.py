"""Domain services: feeds, pricing, valuation, snapshots and maintenance."""
