from .dispatch import GoodsDispatch, GoodsDispatchItem

__all__ = ["GoodsDispatch", "GoodsDispatchItem"]
