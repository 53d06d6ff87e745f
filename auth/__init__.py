"""auth/ -- Authentication package for the Zela API.

Layer rule: auth/ imports only stdlib + third-party libraries.
It does NOT import from api/, core/, or stats/.
api/ imports from auth/, not the other way around.
"""
