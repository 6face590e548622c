"""Shared service-layer building blocks: errors, ports and the base service."""
