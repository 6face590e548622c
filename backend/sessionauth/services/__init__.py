"""Application services (framework-free orchestration)."""
