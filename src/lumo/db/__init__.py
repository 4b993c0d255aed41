"""Database access for Lumo."""
