"""
Profile system - partner profile editing with partial saves and attachments.
"""
