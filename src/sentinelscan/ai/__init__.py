"""AI integration for SentinelScan."""
