"""auth/ -- Authentication package for Stavba.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or billing/.
api/ imports from auth/, not the other way around.
"""
