"""
CES gateway: authenticated, AK/SK-signing proxy for the cloud monitoring API.
"""
