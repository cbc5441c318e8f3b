"""Core configuration, enumerations and errors."""
