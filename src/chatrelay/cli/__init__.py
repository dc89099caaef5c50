"""Interactive terminal client for the chatrelay API."""
