"""Plugin settings service package."""
