"""Console entry points: the kernel and the Commander."""

from .commander import Commander
from .kernel import ConsoleKernel

__all__ = ["Commander", "ConsoleKernel"]
