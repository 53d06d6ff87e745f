"""stats/ -- Read-only aggregate reporting for the Zela API.

Layer rule: stats/ imports only stdlib + third-party libraries.
It does NOT import from api/, core/, or auth/.
"""
