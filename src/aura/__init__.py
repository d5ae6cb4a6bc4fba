"""
Aura Trust - account trust and device binding policies.

Single-device-per-account enforcement for marketplace accounts, and trust
score classification, gating and recommendations.
"""

__version__ = "0.1.0"
__author__ = "Aura Contributors"

from aura.config import AuraConfig, load_config

__all__ = ["AuraConfig", "load_config", "__version__"]
