"""
Organization system - organization settings, users and partner form setup.
"""
