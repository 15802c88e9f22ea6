"""
Application Services.

The facet filter engine and the catalog query composer.
"""
