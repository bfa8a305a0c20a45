"""OpenAI wire dialect (also used by Azure and OpenAI-compatible vendors)."""
