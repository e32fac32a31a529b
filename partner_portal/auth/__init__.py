"""
Auth system - bearer token verification for partner and organization users.
"""
