"""auth/ -- Credential store and session authority for ReliefMap.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or directory/.
api/ and directory/ import from auth/, not the other way around.
"""
