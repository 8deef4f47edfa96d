from __future__ import annotations

import re
from typing import Any

from hubfabric.topology.nodes import (
    Association,
    Attachment,
    CustomerGateway,
    Hub,
    PlanNode,
    Propagation,
    RoutingDomain,
    Segment,
    SubnetRoute,
    VpnLink,
)
from hubfabric.topology.plan import BuildPlan

VPN_ATTACHMENT_PARAMETER = "VpnAttachmentId"


def logical_id(key: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in re.split(r"[^A-Za-z0-9]+", key) if part)


def _tags(name: str) -> list[dict[str, str]]:
    return [{"Key": "Name", "Value": name}]


class TemplateRenderer:
    """Renders a build plan as a CloudFormation-style template.

    Dependencies become ``Ref`` values or explicit ``DependsOn`` entries so the
    backend creates resources in plan order. The VPN attachment id cannot be
    referenced from the VPN connection, so it is taken as a template parameter.
    """

    def __init__(self, plan: BuildPlan, description: str = "Hybrid hub-and-spoke network fabric") -> None:
        self.plan = plan
        self.description = description
        self.resources: dict[str, Any] = {}
        self.parameters: dict[str, Any] = {}

    def _ref(self, key: str) -> dict[str, Any]:
        node = self.plan.get(key)
        if isinstance(node, Attachment) and node.resource_type == "vpn":
            return {"Ref": VPN_ATTACHMENT_PARAMETER}
        return {"Ref": logical_id(key)}

    def _depends(self, node: PlanNode) -> list[str]:
        out = []
        for dep in node.depends_on:
            target = self.plan.get(dep)
            if isinstance(target, Attachment) and target.resource_type == "vpn":
                dep = target.owner
            out.append(logical_id(dep))
        return sorted(set(out))

    def _segment(self, node: Segment) -> None:
        vpc = logical_id(node.key)
        self.resources[vpc] = {
            "Type": "AWS::EC2::VPC",
            "Properties": {"CidrBlock": node.cidr, "Tags": _tags(f"{node.name}-VPC")},
        }
        for subnet in node.subnets:
            base = f"{vpc}Subnet{subnet.index}"
            self.resources[base] = {
                "Type": "AWS::EC2::Subnet",
                "Properties": {"VpcId": {"Ref": vpc}, "CidrBlock": subnet.cidr, "Tags": _tags(subnet.subnet_id)},
            }
            self.resources[f"{base}RouteTable"] = {
                "Type": "AWS::EC2::RouteTable",
                "Properties": {"VpcId": {"Ref": vpc}, "Tags": _tags(subnet.route_table_id)},
            }
            self.resources[f"{base}RouteTableAssociation"] = {
                "Type": "AWS::EC2::SubnetRouteTableAssociation",
                "Properties": {"SubnetId": {"Ref": base}, "RouteTableId": {"Ref": f"{base}RouteTable"}},
            }

    def _hub(self, node: Hub) -> dict[str, Any]:
        return {
            "Type": "AWS::EC2::TransitGateway",
            "Properties": {
                "AmazonSideAsn": node.asn,
                "Description": "TGW for hybrid networking",
                "AutoAcceptSharedAttachments": "enable",
                "DefaultRouteTableAssociation": "enable" if node.default_route_table_association else "disable",
                "DefaultRouteTablePropagation": "enable" if node.default_route_table_propagation else "disable",
                "DnsSupport": "enable" if node.dns_support else "disable",
                "VpnEcmpSupport": "enable" if node.vpn_ecmp_support else "disable",
                "Tags": _tags(node.name),
            },
        }

    def _resource(self, node: PlanNode) -> dict[str, Any] | None:
        if isinstance(node, Hub):
            return self._hub(node)
        if isinstance(node, CustomerGateway):
            return {
                "Type": "AWS::EC2::CustomerGateway",
                "Properties": {
                    "BgpAsn": node.asn,
                    "IpAddress": node.ip_address,
                    "Type": node.type,
                    "Tags": _tags(node.name),
                },
            }
        if isinstance(node, VpnLink):
            return {
                "Type": "AWS::EC2::VPNConnection",
                "Properties": {
                    "TransitGatewayId": self._ref(self.plan.hub.key),
                    "CustomerGatewayId": self._ref(self.plan.customer_gateway.key),
                    "StaticRoutesOnly": node.static_routes_only,
                    "Type": node.type,
                    "Tags": _tags(node.name),
                },
            }
        if isinstance(node, Attachment):
            if node.resource_type == "vpn":
                return None
            segment = self.plan.require(node.owner, Segment)
            return {
                "Type": "AWS::EC2::TransitGatewayAttachment",
                "Properties": {
                    "TransitGatewayId": self._ref(self.plan.hub.key),
                    "VpcId": self._ref(segment.key),
                    "SubnetIds": [{"Ref": f"{logical_id(segment.key)}Subnet{s.index}"} for s in segment.subnets],
                    "Tags": _tags(f"{node.name}-tgw-attachment"),
                },
            }
        if isinstance(node, RoutingDomain):
            return {
                "Type": "AWS::EC2::TransitGatewayRouteTable",
                "Properties": {"TransitGatewayId": self._ref(self.plan.hub.key), "Tags": _tags(f"{node.name}-RouteTable")},
            }
        if isinstance(node, Association):
            return {
                "Type": "AWS::EC2::TransitGatewayRouteTableAssociation",
                "Properties": {
                    "TransitGatewayRouteTableId": self._ref(node.domain),
                    "TransitGatewayAttachmentId": self._ref(node.attachment),
                },
                "DependsOn": self._depends(node),
            }
        if isinstance(node, Propagation):
            return {
                "Type": "AWS::EC2::TransitGatewayRouteTablePropagation",
                "Properties": {
                    "TransitGatewayRouteTableId": self._ref(node.domain),
                    "TransitGatewayAttachmentId": self._ref(node.attachment),
                },
                "DependsOn": self._depends(node),
            }
        if isinstance(node, SubnetRoute):
            return {
                "Type": "AWS::EC2::Route",
                "Properties": {
                    "RouteTableId": {"Ref": f"{logical_id(node.segment)}Subnet{node.subnet_index}RouteTable"},
                    "DestinationCidrBlock": node.destination,
                    "TransitGatewayId": self._ref(node.target),
                },
                "DependsOn": self._depends(node),
            }
        raise TypeError(f"no template mapping for {type(node).__name__}")

    def render(self) -> dict[str, Any]:
        for node in self.plan.ordered():
            if isinstance(node, Segment):
                self._segment(node)
                continue
            resource = self._resource(node)
            if resource is None:
                self.parameters[VPN_ATTACHMENT_PARAMETER] = {
                    "Type": "String",
                    "Description": f"Transit gateway attachment id of {node.owner}",
                }
                continue
            self.resources[logical_id(node.key)] = resource

        outputs: dict[str, Any] = {}
        plan_outputs = self.plan.outputs()
        for segment in self.plan.segments:
            outputs[f"{logical_id(segment.name)}SegmentId"] = {
                "Description": f"Segment id of {segment.name}",
                "Value": self._ref(segment.key),
            }
        if self.plan.hub is not None:
            outputs["TransitGatewayId"] = {"Description": "Transit Gateway ID", "Value": self._ref(self.plan.hub.key)}
        if self.plan.vpn is not None:
            outputs["VPNConnectionId"] = {"Description": "VPN Connection ID", "Value": self._ref(self.plan.vpn.key)}
        outputs["OnPremPublicAddress"] = {
            "Description": "On-prem public address",
            "Value": plan_outputs["onprem_public_address"],
        }

        template: dict[str, Any] = {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Description": self.description,
        }
        if self.parameters:
            template["Parameters"] = self.parameters
        template["Resources"] = self.resources
        template["Outputs"] = outputs
        return template


def render_template(plan: BuildPlan) -> dict[str, Any]:
    return TemplateRenderer(plan).render()
