"""
Catalog Domain - Goods, classification lookups and the Entity Graph.

This domain handles the quality catalog:
- Products (finished goods)
- Semi Products (intermediate goods)
- Raw Materials (purchased leaf goods)
- Flat lookup tables and product group type definitions
"""
