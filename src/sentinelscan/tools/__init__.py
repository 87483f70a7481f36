"""Low-level network and markup helpers used by the detectors."""
