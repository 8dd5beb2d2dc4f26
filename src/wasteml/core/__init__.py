"""Core Module

This package contains the core functionality for wasteml: dataset scanning
and splitting, evaluation metrics, prediction reporting, configuration and
file handling.

Submodules:
    - config: TOML configuration loading
    - datasets: Dataset scanning, splitting and schema
    - device: Device selection for PyTorch operations
    - evaluate: Multiclass evaluation metrics and reports
    - exceptions: Error taxonomy
    - files: Text/binary file wrappers
    - logger: Logging configuration
    - report: Prediction CSV and class distribution

Note: Heavy dependencies (torch, torchvision) are only imported by the
device module and the adapters package. Import from specific submodules:
    from wasteml.core.datasets import scan_dataset
    from wasteml.core.report import write_predictions_csv
"""
