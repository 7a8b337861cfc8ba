"""Books CRUD REST API."""
