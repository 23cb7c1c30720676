"""
Generators package for the datagen load generator.

Re-exports the generator interfaces and the concrete event families so
downstream code can import from `datagen.generators` directly.
"""

from datagen.generators.abstract import AbstractLoadGenerator, LoadGenerator, offer
from datagen.generators.ad_click import AdClickGenerator
from datagen.generators.ecommerce import EcommerceGenerator

__all__ = [
    # Abstracts
    "AbstractLoadGenerator",
    "LoadGenerator",
    "offer",
    # Concrete generators
    "AdClickGenerator",
    "EcommerceGenerator",
]
