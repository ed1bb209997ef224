"""
Core business logic package for FareWatch.

Fare checks, recipient resolution, notification dispatch and alert store
access live here. Lambda handlers in src/handlers/ are thin wrappers that
call into core/.
"""

__all__: list[str] = []
