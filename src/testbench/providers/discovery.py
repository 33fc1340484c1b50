"""Package provider auto-discovery through entry points.

Installed distributions advertise providers in their packaging metadata:

    [project.entry-points."testbench.providers"]
    my-package = "my_package.providers:MyServiceProvider"
"""

from collections.abc import Iterable
from importlib.metadata import entry_points

from testbench.utils.logging import get_logger

logger = get_logger("providers.discovery")

ENTRY_POINT_GROUP = "testbench.providers"


class PackageManifest:
    """Lists discoverable providers, honouring the `dont-discover` list.

    An entry is skipped when its entry-point name, its target or its
    distribution name is listed. A `"*"` entry disables discovery.
    """

    def __init__(
        self, dont_discover: Iterable[str] = (), *, group: str = ENTRY_POINT_GROUP
    ) -> None:
        self.dont_discover = set(dont_discover)
        self.group = group

    def should_discover(self) -> bool:
        return "*" not in self.dont_discover

    def _ignored(self, name: str, value: str, dist_name: str | None) -> bool:
        return bool({name, value, dist_name} & self.dont_discover)

    def providers(self) -> list[str]:
        """Dotted paths of the discovered providers, in discovery order."""
        if not self.should_discover():
            logger.debug("Package discovery disabled")
            return []

        found: list[str] = []
        for entry_point in entry_points(group=self.group):
            dist = getattr(entry_point, "dist", None)
            dist_name = dist.name if dist is not None else None
            if self._ignored(entry_point.name, entry_point.value, dist_name):
                logger.debug("Skipping provider %s (dont-discover)", entry_point.name)
                continue
            if entry_point.value not in found:
                found.append(entry_point.value)

        logger.debug("Discovered %d package providers", len(found))
        return found
