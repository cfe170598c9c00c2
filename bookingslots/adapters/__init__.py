"""
Adapters layer - Persistence integrations.
"""

from .yaml_store import YamlAppointmentStore

__all__ = ["YamlAppointmentStore"]
