"""Live-reloading markdown previews served from the local filesystem."""
