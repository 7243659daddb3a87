"""Business logic services used by handlers.

Services are imported lazily by handlers so a cold start only pays for the
route it serves.
"""

# Do NOT import services here - use lazy loading in handlers instead
