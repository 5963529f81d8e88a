"""Cross-cutting building blocks: settings, errors, protocols, logging."""
