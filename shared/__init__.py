"""
Shared utilities for SecureGuard components.

- logging_config: one logging setup for the service and the scripts
- guard_client: HTTP client for the control API
"""
