"""SentinelScan functional modules."""
