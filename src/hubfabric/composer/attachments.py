from __future__ import annotations

import logging

from hubfabric.core.errors import DanglingReferenceError, DuplicateAttachmentError
from hubfabric.topology.nodes import Attachment, Hub, Segment, VpnLink
from hubfabric.topology.plan import BuildPlan
from hubfabric.utils.hashing import resource_id

logger = logging.getLogger(__name__)


class AttachmentRegistry:
    """Binds segments and the VPN link to the hub; decides nothing about routing."""

    def __init__(self, plan: BuildPlan, seed: str) -> None:
        self.plan = plan
        self.seed = seed

    def _check_endpoints(self, owner_key: str, hub: Hub) -> None:
        for key in (hub.key, owner_key):
            if key not in self.plan:
                raise DanglingReferenceError(f"cannot attach {owner_key}: {key} was never declared")
        existing = self.plan.attachment_for(owner_key)
        if existing is not None:
            raise DuplicateAttachmentError(f"{owner_key} is already attached as {existing.attachment_id}")

    def attach(self, segment: Segment, hub: Hub) -> Attachment:
        self._check_endpoints(segment.key, hub)
        attachment = Attachment(
            name=segment.name,
            owner=segment.key,
            attachment_id=resource_id("tgw-attach", segment.key, self.seed),
            resource_type="vpc",
            subnet_ids=segment.subnet_ids,
        )
        logger.info("attach %s -> %s", segment.name, hub.name)
        return self.plan.add(attachment)

    def attach_vpn(self, vpn: VpnLink, hub: Hub) -> Attachment:
        self._check_endpoints(vpn.key, hub)
        attachment = Attachment(
            name="vpn",
            owner=vpn.key,
            attachment_id=resource_id("tgw-attach", vpn.key, self.seed),
            resource_type="vpn",
        )
        logger.info("attach %s -> %s", vpn.name, hub.name)
        return self.plan.add(attachment)
