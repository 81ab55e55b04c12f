"""Table building, configuration and run orchestration."""
