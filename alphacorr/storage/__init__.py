"""Shared storage for large numeric arrays."""

from .buffer_store import BufferHandle, BufferStore, store_values

__all__ = [
    'BufferHandle',
    'BufferStore',
    'store_values',
]
