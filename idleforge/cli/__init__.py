"""idleforge CLI package."""
