"""Core building blocks: results, exit codes, configuration."""
