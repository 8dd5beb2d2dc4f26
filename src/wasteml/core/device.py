"""
Device Management
=================

Centralized device selection for PyTorch operations.

Usage:
    from wasteml.core.device import get_device

    device = get_device()
    model = model.to(device)
"""

from typing import Optional, Union

import torch

from wasteml.core.logger import get_logger

logger = get_logger(__name__)


def get_device(prefer_cuda: bool = True) -> torch.device:
    """
    Get the best available device for computation.

    Args:
        prefer_cuda: If True (default), prefer CUDA if available.

    Returns:
        torch.device: The selected device (cuda or cpu)
    """
    if prefer_cuda and torch.cuda.is_available():
        device = torch.device("cuda")
        logger.debug(f"Using CUDA device: {torch.cuda.get_device_name(0)}")
    else:
        device = torch.device("cpu")
        logger.debug("Using CPU device")

    return device


def resolve_device(device: Optional[Union[str, torch.device]] = None) -> torch.device:
    """Turn a device name (or None for auto-detect) into a torch.device."""
    if device is None or device == "auto":
        return get_device()
    if isinstance(device, str):
        return torch.device(device)
    return device
