"""Output layer — rich tables and JSON rendering of OpResult."""
