"""Factory classes for creating gateway instances."""

from shopally.services.factory.gateway_factory import GatewayFactory, GatewayProvider

__all__ = ["GatewayProvider", "GatewayFactory"]
