"""POS back-office form core."""
