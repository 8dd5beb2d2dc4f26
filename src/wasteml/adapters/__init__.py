"""Adapters for external library integrations.

This package contains adapters that wrap PyTorch and torchvision to provide
wasteml-compatible interfaces. Only the services layer should import from
these adapters - core code should not depend on them.
"""
