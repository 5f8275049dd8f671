"""Built-in cleanup category rules, one module per category."""
