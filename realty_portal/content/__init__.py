"""
Content helpers: payload validation, image interleaving and location formatting.
"""
