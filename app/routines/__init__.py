"""Routine modules registered in the process-wide catalog."""
