"""GitHub code-scanning integration (SARIF upload)."""
