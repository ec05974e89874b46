"""Blueprint packages; each exposes its Blueprint object for create_app()."""
