"""Deploy relay: GitHub push webhooks to Jenkins deploy builds.

This package provides:
- Repository registration (GitHub webhook creation with a per-repository
  secret and an initial Jenkins build)
- Push delivery verification with HMAC-SHA256 signatures
- Parameterized Jenkins build triggers
- In-memory, process-lifetime secret storage
"""
