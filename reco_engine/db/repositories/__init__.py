"""
Repositories: explicit SQL per table.
"""
