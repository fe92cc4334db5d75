"""Core infrastructure shared by every starmap component."""
