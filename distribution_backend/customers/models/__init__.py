"""
PATH: customers/models/__init__.py

Customers models export surface.
"""

from .customer import Customer

__all__ = ["Customer"]
