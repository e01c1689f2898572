from .company import Company, Customer

__all__ = ["Company", "Customer"]
