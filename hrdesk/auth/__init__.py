"""Auth module — identity verification, role assignments and access policies."""
