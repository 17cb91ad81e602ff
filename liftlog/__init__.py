"""LiftLog: live workout session engine and training analytics."""
