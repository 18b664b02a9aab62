"""Shared utilities."""

from .image import split_image
from .quantity import cpu_to_cores, parse_cpu, parse_kubernetes_memory, parse_memory

__all__ = ["cpu_to_cores", "parse_cpu", "parse_kubernetes_memory", "parse_memory", "split_image"]
