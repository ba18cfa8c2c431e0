"""
domain - Entities, value objects, ports and exceptions.

No I/O and no third-party imports. Everything else depends on this package.
"""
