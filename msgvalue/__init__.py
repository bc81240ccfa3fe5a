"""A dynamic MessagePack value type with compact encoding and object conversion."""

__version__ = "0.1.0"
__all__ = ["de", "encode", "errors", "scalars", "ser", "value", "variants"]