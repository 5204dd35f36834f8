"""Parallel and JIT-compiled escape-time backends."""
