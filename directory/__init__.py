"""directory/ -- Resource directory: submissions, moderation status, public listing.

Layer rule: directory/ imports from core/ and auth/ (session verification)
only. It does NOT import from api/.
"""
