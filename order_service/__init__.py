"""
Order Service - orders and order items over PostgreSQL
"""
__version__ = "1.0.0"
