"""Framework plumbing: configuration, extensions, logging and error handling."""
