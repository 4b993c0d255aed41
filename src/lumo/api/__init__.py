"""HTTP API for the Lumo daemon."""
