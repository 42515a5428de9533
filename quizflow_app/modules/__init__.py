"""Feature modules, each a blueprint plus its services."""
