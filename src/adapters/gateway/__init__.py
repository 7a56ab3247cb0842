"""Payment gateway adapters - Checkout implementations."""

from .sandbox import SandboxPaymentGateway

__all__ = ["SandboxPaymentGateway"]
