"""Cross-cutting helpers shared across IAM API features."""
