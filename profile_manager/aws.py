# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""AWS resources backing a cluster: VPC, subnets, proxy, KMS keys and IAM roles."""

from __future__ import annotations

import ipaddress
import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import ClientError, NoCredentialsError, WaiterError

from profile_manager import logger
from profile_manager.constants import (
    AUDIT_LOG_POLICY_NAME,
    AUDIT_LOG_SERVICE_ACCOUNT,
    PROXY_INSTANCE_TYPE,
    PROXY_NO_PROXY,
    PROXY_PORT,
    SUBNET_PREFIX_LENGTH,
)
from profile_manager.errors import ProvisioningError
from profile_manager.models import VPC, ProxyDetail

KMS_KEY_USER_ACTIONS = [
    "kms:Encrypt",
    "kms:Decrypt",
    "kms:ReEncrypt*",
    "kms:GenerateDataKey*",
    "kms:DescribeKey",
    "kms:CreateGrant",
]
AUDIT_LOG_ACTIONS = [
    "logs:CreateLogGroup",
    "logs:CreateLogStream",
    "logs:DescribeLogGroups",
    "logs:DescribeLogStreams",
    "logs:PutLogEvents",
    "logs:PutRetentionPolicy",
]


@contextmanager
def _aws_errors(action: str) -> Iterator[None]:
    """Wrap botocore failures into ProvisioningError."""
    try:
        yield
    except (ClientError, NoCredentialsError, WaiterError) as err:
        raise ProvisioningError(f"Failed to {action}: {err}") from err


def _name_tags(resource_type: str, name: str) -> list[dict[str, Any]]:
    return [{"ResourceType": resource_type, "Tags": [{"Key": "Name", "Value": name}]}]


class AWSClient:
    """Creates the AWS resources a profile asks for in one region."""

    def __init__(self, region: str) -> None:
        self.region = region
        self._clients: dict[str, Any] = {}

    def _get_client(self, service: str):
        """Get a boto3 client for *service* using the default credential chain."""
        if service not in self._clients:
            self._clients[service] = boto3.client(service, region_name=self.region)
        return self._clients[service]

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def create_vpc(self, name: str, cidr: str) -> VPC:
        ec2 = self._get_client("ec2")
        with _aws_errors(f"create VPC {name}"):
            vpc_id = ec2.create_vpc(
                CidrBlock=cidr, TagSpecifications=_name_tags("vpc", name),
            )["Vpc"]["VpcId"]
            ec2.get_waiter("vpc_available").wait(VpcIds=[vpc_id])
            ec2.modify_vpc_attribute(VpcId=vpc_id, EnableDnsSupport={"Value": True})
            ec2.modify_vpc_attribute(VpcId=vpc_id, EnableDnsHostnames={"Value": True})
            igw_id = ec2.create_internet_gateway(
                TagSpecifications=_name_tags("internet-gateway", name),
            )["InternetGateway"]["InternetGatewayId"]
            ec2.attach_internet_gateway(InternetGatewayId=igw_id, VpcId=vpc_id)
        logger.info("Created VPC %s (%s) in %s", vpc_id, cidr, self.region)
        return VPC(vpc_id=vpc_id, cidr=cidr, region=self.region, name=name, internet_gateway_id=igw_id)

    def default_zones(self, count: int) -> list[str]:
        ec2 = self._get_client("ec2")
        with _aws_errors(f"list availability zones in {self.region}"):
            zones = ec2.describe_availability_zones(
                Filters=[
                    {"Name": "state", "Values": ["available"]},
                    {"Name": "zone-type", "Values": ["availability-zone"]},
                ],
            )["AvailabilityZones"]
        return sorted(zone["ZoneName"] for zone in zones)[:count]

    def _create_subnet(self, vpc: VPC, zone: str, cidr: str, role_tag: str) -> str:
        ec2 = self._get_client("ec2")
        subnet_id = ec2.create_subnet(
            VpcId=vpc.vpc_id,
            AvailabilityZone=zone,
            CidrBlock=cidr,
            TagSpecifications=[{
                "ResourceType": "subnet",
                "Tags": [{"Key": "Name", "Value": f"{vpc.name}-{zone}"}, {"Key": role_tag, "Value": "1"}],
            }],
        )["Subnet"]["SubnetId"]
        return subnet_id

    def _route_subnet(self, vpc: VPC, subnet_id: str, **target: str) -> None:
        ec2 = self._get_client("ec2")
        table_id = ec2.create_route_table(VpcId=vpc.vpc_id)["RouteTable"]["RouteTableId"]
        ec2.create_route(RouteTableId=table_id, DestinationCidrBlock="0.0.0.0/0", **target)
        ec2.associate_route_table(RouteTableId=table_id, SubnetId=subnet_id)

    def create_subnets(self, vpc: VPC, zones: list[str]) -> dict[str, list[str]]:
        """Create one public and one private subnet per zone.

        Public subnets route through the VPC internet gateway; each private
        subnet gets a NAT gateway in the public subnet of its zone.

        Args:
            vpc: Prepared VPC handle; its subnet lists are updated in place.
            zones: Availability zones to spread the subnets across.

        Returns:
            Mapping with ``private`` and ``public`` subnet ID lists.
        """
        ec2 = self._get_client("ec2")
        cidrs = ipaddress.ip_network(vpc.cidr).subnets(new_prefix=SUBNET_PREFIX_LENGTH)
        with _aws_errors(f"create subnets in VPC {vpc.vpc_id}"):
            for zone in zones:
                public_id = self._create_subnet(vpc, zone, str(next(cidrs)), "kubernetes.io/role/elb")
                self._route_subnet(vpc, public_id, GatewayId=vpc.internet_gateway_id)
                private_id = self._create_subnet(vpc, zone, str(next(cidrs)), "kubernetes.io/role/internal-elb")
                allocation_id = ec2.allocate_address(Domain="vpc")["AllocationId"]
                nat_id = ec2.create_nat_gateway(
                    SubnetId=public_id, AllocationId=allocation_id,
                )["NatGateway"]["NatGatewayId"]
                ec2.get_waiter("nat_gateway_available").wait(NatGatewayIds=[nat_id])
                self._route_subnet(vpc, private_id, NatGatewayId=nat_id)
                vpc.public_subnet_ids.append(public_id)
                vpc.private_subnet_ids.append(private_id)
                logger.info("Prepared subnets in %s: public=%s private=%s", zone, public_id, private_id)
        return {"private": list(vpc.private_subnet_ids), "public": list(vpc.public_subnet_ids)}

    def create_security_groups(self, vpc: VPC, count: int, prefix: str) -> list[str]:
        ec2 = self._get_client("ec2")
        group_ids: list[str] = []
        with _aws_errors(f"create security groups in VPC {vpc.vpc_id}"):
            for index in range(count):
                name = f"{prefix}-additional-{index}"
                group_id = ec2.create_security_group(
                    GroupName=name,
                    Description=f"Additional security group {index} for {prefix}",
                    VpcId=vpc.vpc_id,
                    TagSpecifications=_name_tags("security-group", name),
                )["GroupId"]
                group_ids.append(group_id)
        return group_ids

    def launch_proxy(self, vpc: VPC, ami_id: str, ssh_pem_file: str, ca_bundle_file: str) -> ProxyDetail:
        """Launch a forward proxy host in the first public subnet of *vpc*.

        The image is expected to serve HTTP and HTTPS on ``PROXY_PORT`` with a
        certificate signed by the CA in *ca_bundle_file*.
        """
        if not ami_id:
            raise ProvisioningError("PROXY_AMI_ID is required to prepare a proxy")
        if not vpc.public_subnet_ids:
            raise ProvisioningError(f"VPC {vpc.vpc_id} has no public subnet for the proxy")
        if not ca_bundle_file or not Path(ca_bundle_file).is_file():
            raise ProvisioningError(f"Proxy CA bundle file '{ca_bundle_file}' does not exist")

        ec2 = self._get_client("ec2")
        name = f"{vpc.name}-proxy"
        with _aws_errors(f"launch proxy in VPC {vpc.vpc_id}"):
            group_id = ec2.create_security_group(
                GroupName=name, Description=f"Proxy for {vpc.name}", VpcId=vpc.vpc_id,
            )["GroupId"]
            ec2.authorize_security_group_ingress(
                GroupId=group_id,
                IpPermissions=[{
                    "IpProtocol": "tcp", "FromPort": PROXY_PORT, "ToPort": PROXY_PORT,
                    "IpRanges": [{"CidrIp": vpc.cidr}],
                }],
            )
            instance_args: dict[str, Any] = {
                "ImageId": ami_id,
                "InstanceType": PROXY_INSTANCE_TYPE,
                "MinCount": 1,
                "MaxCount": 1,
                "NetworkInterfaces": [{
                    "DeviceIndex": 0,
                    "SubnetId": vpc.public_subnet_ids[0],
                    "AssociatePublicIpAddress": True,
                    "Groups": [group_id],
                }],
                "TagSpecifications": _name_tags("instance", name),
            }
            if ssh_pem_file:
                instance_args["KeyName"] = Path(ssh_pem_file).stem
            instance_id = ec2.run_instances(**instance_args)["Instances"][0]["InstanceId"]
            ec2.get_waiter("instance_running").wait(InstanceIds=[instance_id])
            instance = ec2.describe_instances(InstanceIds=[instance_id])["Reservations"][0]["Instances"][0]
        private_ip = instance["PrivateIpAddress"]
        logger.info("Proxy instance %s is running at %s", instance_id, private_ip)
        return ProxyDetail(
            http_proxy=f"http://{private_ip}:{PROXY_PORT}",
            https_proxy=f"https://{private_ip}:{PROXY_PORT}",
            no_proxy=PROXY_NO_PROXY,
            ca_bundle_file_path=ca_bundle_file,
        )

    # ------------------------------------------------------------------
    # KMS
    # ------------------------------------------------------------------

    def create_kms_key(self, multi_region: bool, owner_tag: str, hcp: bool) -> str:
        kms = self._get_client("kms")
        tags = [{"TagKey": "owner", "TagValue": owner_tag}]
        if hcp:
            tags.append({"TagKey": "red-hat", "TagValue": "true"})
        with _aws_errors("create KMS key"):
            metadata = kms.create_key(
                Description=f"Cluster encryption key owned by {owner_tag}",
                KeyUsage="ENCRYPT_DECRYPT",
                MultiRegion=multi_region,
                Tags=tags,
            )["KeyMetadata"]
        logger.info("Created KMS key %s", metadata["Arn"])
        return metadata["Arn"]

    def grant_kms_key(self, key_arn: str, principals: list[str], sid: str) -> None:
        """Allow *principals* to use the key by extending its default policy."""
        kms = self._get_client("kms")
        with _aws_errors(f"update policy of KMS key {key_arn}"):
            policy = json.loads(kms.get_key_policy(KeyId=key_arn, PolicyName="default")["Policy"])
            policy["Statement"] = [s for s in policy.get("Statement", []) if s.get("Sid") != sid]
            policy["Statement"].append({
                "Sid": sid,
                "Effect": "Allow",
                "Principal": {"AWS": principals},
                "Action": KMS_KEY_USER_ACTIONS,
                "Resource": "*",
            })
            kms.put_key_policy(KeyId=key_arn, PolicyName="default", Policy=json.dumps(policy))
        logger.info("Granted %d principals access to KMS key %s", len(principals), key_arn)

    # ------------------------------------------------------------------
    # IAM
    # ------------------------------------------------------------------

    def create_audit_log_role(self, role_name: str, issuer_url: str) -> str:
        """Create the role the audit-log exporter assumes through the OIDC provider."""
        sts = self._get_client("sts")
        iam = self._get_client("iam")
        issuer_host = issuer_url.removeprefix("https://")
        with _aws_errors(f"create audit log role {role_name}"):
            account_id = sts.get_caller_identity()["Account"]
            trust_policy = {
                "Version": "2012-10-17",
                "Statement": [{
                    "Effect": "Allow",
                    "Principal": {"Federated": f"arn:aws:iam::{account_id}:oidc-provider/{issuer_host}"},
                    "Action": "sts:AssumeRoleWithWebIdentity",
                    "Condition": {"StringEquals": {f"{issuer_host}:sub": AUDIT_LOG_SERVICE_ACCOUNT}},
                }],
            }
            role_arn = iam.create_role(
                RoleName=role_name, AssumeRolePolicyDocument=json.dumps(trust_policy),
            )["Role"]["Arn"]
            iam.put_role_policy(
                RoleName=role_name,
                PolicyName=AUDIT_LOG_POLICY_NAME,
                PolicyDocument=json.dumps({
                    "Version": "2012-10-17",
                    "Statement": [{"Effect": "Allow", "Action": AUDIT_LOG_ACTIONS, "Resource": "arn:aws:logs:*:*:*"}],
                }),
            )
        logger.info("Created audit log role %s", role_arn)
        return role_arn
