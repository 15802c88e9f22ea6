"""
BOM Domain - Bill of Materials.

This domain handles the recursive composition of goods:
- A Product owns at most one Recipe
- A Semi Product may own a Recipe of its own
- Recipe rows reference Raw Materials or Semi Products
- Norms and Specs are the quality documents of a Product
"""
