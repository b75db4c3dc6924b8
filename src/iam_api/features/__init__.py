"""Feature packages (routers, schemas and services)."""
