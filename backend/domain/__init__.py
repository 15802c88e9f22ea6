"""
Domain layer.

Pure entities, value objects and the catalog engine algorithms.
No framework imports below this package.
"""
