"""Long-running helpers for skilllint."""
