"""Framework-independent building blocks shared by every feature."""
