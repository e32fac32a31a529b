"""
Partner portal API.

Partner agencies edit their multi-section profile here; organizations
configure which profile sections their partners see.
"""
