"""auth/ -- Identity package for Travel Globe.

Credential hashing, bearer-token issuance/verification, the user repository,
the register/login flows and the FastAPI guard dependencies.

Layer rule: auth/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/, travel/, or cache/.
api/ imports from auth/, not the other way around.
"""
