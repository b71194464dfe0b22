"""
Shared Layer - Cross-Cutting Concerns
Error contract, observability, and HTTP utilities
"""
