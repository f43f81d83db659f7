"""
Identity - signing key material for the Slender client.
"""
