"""Client facade, HTTP service and debugging CLI."""
