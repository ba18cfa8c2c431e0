"""
infrastructure - Concrete implementations of domain ports.

Contains the requests-based HTTP client, credential storage and settings.
Depends on domain/ only (implements ports). Never imported by application/.
"""
