"""core/ -- Kernel package: configuration and the shared error taxonomy.

Layer rule: core/ imports only stdlib + third-party libraries.
It does NOT import from api/, auth/, or directory/.
"""
