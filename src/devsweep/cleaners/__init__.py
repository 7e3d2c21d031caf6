"""Built-in cleaners. Every module here is scanned by the cleaner loader."""
