"""
application - Session management and feature services.

Depends on domain/ only. Talks to the backend through the ApiClient port.
"""
