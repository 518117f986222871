"""Terraform-style infrastructure-as-code for GitLab."""

__version__ = "0.1.0"
