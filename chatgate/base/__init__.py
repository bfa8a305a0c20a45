"""Provider-agnostic building blocks (errors, models, credentials, endpoints, streaming)."""
