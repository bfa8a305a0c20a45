"""Pure helpers: model family traits and the custom model table."""
