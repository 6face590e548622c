"""Framework plumbing: configuration, logging, errors, extensions."""
