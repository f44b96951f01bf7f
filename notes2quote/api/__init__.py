"""Flask routes, HTML templates and the screen renderer."""
