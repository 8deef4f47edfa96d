from __future__ import annotations

import logging
from typing import Callable

from hubfabric.config.loader import validate_config
from hubfabric.config.schema import FabricConfig
from hubfabric.core.errors import AsymmetricPropagationError, CompositionError, ConfigurationError
from hubfabric.core.model import ValidationContext
from hubfabric.topology.nodes import Attachment, Hub, Segment, VpnLink
from hubfabric.topology.plan import BuildPlan
from hubfabric.validators.engine import run_validators

from .attachments import AttachmentRegistry
from .domains import RoutingDomainBuilder
from .gateway import GatewayProvisioner
from .routes import SubnetRouteInstaller
from .segments import DEVELOPMENT, ONPREM, PRODUCTION, build_segments

logger = logging.getLogger(__name__)


class TopologyComposer:
    """Builds the full hybrid hub topology for one configuration.

    Composition is all-or-nothing: if any step fails, ``plan`` is reset to an
    empty plan and the error is raised with the failing step named.
    """

    def __init__(self, config: FabricConfig) -> None:
        self.config = config
        self.plan = BuildPlan()
        self.segments: dict[str, Segment] = {}
        self.attachments: dict[str, Attachment] = {}
        self.hub: Hub | None = None
        self.vpn: VpnLink | None = None

    def _steps(self) -> list[tuple[str, Callable[[], None]]]:
        return [
            ("segments", self._build_segments),
            ("gateway", self._build_gateway),
            ("attachments", self._attach),
            ("routing-domains", self._build_domains),
            ("subnet-routes", self._install_routes),
            ("evaluate", self._evaluate),
            ("validate", self._validate),
        ]

    def compose(self) -> BuildPlan:
        validate_config(self.config)
        self.plan = BuildPlan()
        for step, fn in self._steps():
            logger.info("compose %s: %s", self.config.seed, step)
            try:
                fn()
            except (ConfigurationError, AsymmetricPropagationError):
                logger.error("composition aborted at step %s", step)
                self._reset()
                raise
            except Exception as exc:
                logger.error("composition aborted at step %s: %s", step, exc)
                self._reset()
                raise CompositionError(step, exc) from exc
        logger.info("composed %d node(s)", len(self.plan))
        return self.plan

    def _reset(self) -> None:
        self.plan = BuildPlan()
        self.segments = {}
        self.attachments = {}
        self.hub = None
        self.vpn = None

    def _build_segments(self) -> None:
        self.segments = build_segments(self.plan, self.config)

    def _build_gateway(self) -> None:
        provisioner = GatewayProvisioner(
            self.plan,
            prefix=self.config.name,
            hub_asn=self.config.asns.hub,
            customer_asn=self.config.asns.customer,
            onprem_ip=self.config.onprem_public_ip,
            seed=self.config.seed,
        )
        self.hub, self.vpn = provisioner.provision()

    def _attach(self) -> None:
        registry = AttachmentRegistry(self.plan, self.config.seed)
        for name in (DEVELOPMENT, PRODUCTION):
            self.attachments[name] = registry.attach(self.segments[name], self.hub)
        self.attachments["vpn"] = registry.attach_vpn(self.vpn, self.hub)

    def _build_domains(self) -> None:
        builder = RoutingDomainBuilder(self.plan, self.hub, self.config.seed)
        builder.build(self.attachments[DEVELOPMENT], self.attachments[PRODUCTION], self.attachments["vpn"])

    def _install_routes(self) -> None:
        installer = SubnetRouteInstaller(self.plan, self.hub)
        dev, prod, onprem = self.segments[DEVELOPMENT], self.segments[PRODUCTION], self.segments[ONPREM]

        installer.install_peer_routes(dev, prod.cidr, self.attachments[DEVELOPMENT])
        installer.install_peer_routes(prod, dev.cidr, self.attachments[PRODUCTION])
        installer.install_peer_routes(dev, onprem.cidr, self.attachments[DEVELOPMENT])
        installer.install_peer_routes(prod, onprem.cidr, self.attachments[PRODUCTION])
        installer.install_default_route(onprem, self.attachments["vpn"])

    def _evaluate(self) -> None:
        self.plan.ordered()

    def _validate(self) -> None:
        summary = run_validators(ValidationContext(config=self.config, plan=self.plan))
        failures = summary.failures()
        if failures:
            names = ", ".join(f.name for f in failures)
            raise AsymmetricPropagationError(f"declared topology failed validation: {names}", failures)


def compose(config: FabricConfig) -> BuildPlan:
    return TopologyComposer(config).compose()
