"""Cross-cutting helpers: structured logging and Prometheus metrics."""
