"""GCP provider implementation."""

from .iam import IAM

__all__ = ["IAM"]
