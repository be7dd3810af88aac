"""api/ -- HTTP surface for ReliefMap. Nothing imports from api/."""
