"""Feature modules of the progress console, one package per screen family."""
