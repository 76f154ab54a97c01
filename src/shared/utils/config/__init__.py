"""Configuration file helpers."""

from src.shared.utils.config.yaml_loader import YAMLLoader

__all__ = ["YAMLLoader"]
