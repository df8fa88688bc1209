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

"""Constants for naming, cluster states, polling and fixed flag values."""

from __future__ import annotations

ROSA_BINARY = "rosa"
CLUSTER_TYPE = "rosa"

# -- Naming --
DEFAULT_NAME_PREFIX = "rosacli"
DEFAULT_NAME_LENGTH = 15
MAX_CLUSTER_NAME_LENGTH = 54
MAX_CLUSTER_DOMAIN_PREFIX_LENGTH = 15
MAX_ROLE_PREFIX_LENGTH = 32
MAX_OIDC_CONFIG_PREFIX_LENGTH = 15
MAX_VPC_PREFIX_LENGTH = 20
RANDOM_SUFFIX_LENGTH = 3

# -- Cluster states --
STATE_READY = "Ready"
STATE_UNINSTALLING = "Uninstalling"
STATE_ERROR = "Error"
STATE_PENDING = "Pending"
STATE_INSTALLING = "Installing"
STATE_VALIDATING = "Validating"
STATE_WAITING = "Waiting"

# -- Readiness polling --
POLL_INTERVAL_SECONDS = 120
WAITING_STATE_LIMIT_MINUTES = 6
DEFAULT_CLUSTER_TIMEOUT_MINUTES = 60

# -- Version selectors --
VERSION_LATEST = "latest"
VERSION_Y_MINUS_ONE = "y-1"
VERSION_Z_MINUS_ONE = "z-1"

# -- Admin user --
CLUSTER_ADMIN_USERNAME = "cluster-admin"
ADMIN_PASSWORD_LENGTH = 14
ADMIN_PASSWORD_SYMBOLS = "-_!@#%^*"

# -- Replicas --
DEFAULT_MIN_REPLICAS = "3"
DEFAULT_MAX_REPLICAS = "6"

# -- Networking --
DEFAULT_VPC_CIDR = "10.0.0.0/16"
DEFAULT_MACHINE_CIDR = "10.0.0.0/16"
DEFAULT_SERVICE_CIDR = "172.31.0.0/24"
DEFAULT_POD_CIDR = "192.168.0.0/18"
DEFAULT_HOST_PREFIX = "25"
SUBNET_PREFIX_LENGTH = 24

# -- Default ingress --
INGRESS_ROUTE_SELECTOR = "app1=test1,app2=test2"
INGRESS_EXCLUDED_NAMESPACES = "test-ns1,test-ns2"
INGRESS_WILDCARD_POLICY = "WildcardsDisallowed"
INGRESS_NAMESPACE_OWNERSHIP_POLICY = "Strict"

# -- Cluster autoscaler --
AUTOSCALER_LOG_VERBOSITY = "4"
AUTOSCALER_MAX_POD_GRACE_PERIOD = "0"
AUTOSCALER_POD_PRIORITY_THRESHOLD = "0"
AUTOSCALER_MAX_NODE_PROVISION_TIME = "10m"
AUTOSCALER_BALANCING_IGNORED_LABELS = "aaa"
AUTOSCALER_MAX_NODES_TOTAL = "1000"
AUTOSCALER_MIN_CORES = "0"
AUTOSCALER_MAX_CORES = "100"
AUTOSCALER_MIN_MEMORY = "0"
AUTOSCALER_MAX_MEMORY = "4096"
AUTOSCALER_SCALE_DOWN_UTILIZATION_THRESHOLD = "0.5"
AUTOSCALER_SCALE_DOWN_DELAY = "10s"

# -- Labels, tags and properties --
WORKER_MP_LABELS = "test-label/openshift.io=,test-label=testvalue"
CLUSTER_TAGS = "test-tag:tagvalue,qe-managed:true"
PROVISION_SHARD_PROPERTY = "provision_shard_id"

# -- KMS --
KMS_KEY_OWNER_TAG = "rosacli"
KMS_OPERATOR_ROLE_MARKERS = ("kube-controller-manager", "ebs-cloud-credentials", "capa-controller-manager",
                             "control-plane-operator")
KMS_ETCD_OPERATOR_ROLE_MARKERS = ("kms-provider",)

# -- Proxy --
PROXY_PORT = 8080
PROXY_INSTANCE_TYPE = "t3.medium"
PROXY_NO_PROXY = "quay.io"

# -- Audit log forwarding --
AUDIT_LOG_SERVICE_ACCOUNT = "system:serviceaccount:openshift-config-managed:cloudwatch-audit-exporter"
AUDIT_LOG_POLICY_NAME = "audit-log-forward"

# -- Artifact file names --
USER_DATA_FILE = "resources.json"
CLUSTER_CONFIG_FILE = "cluster-config.json"
CLUSTER_ADMIN_FILE = "cluster-admin"
CREATE_COMMAND_FILE = "create-command.sh"
CLUSTER_DETAIL_FILE = "cluster-detail.json"
INSTALL_LOG_FILE = "install.log"
CLUSTER_ID_FILE = "cluster-id"
CLUSTER_NAME_FILE = "cluster-name"
API_URL_FILE = "api.url"
CONSOLE_URL_FILE = "console.url"
INFRA_ID_FILE = "infra-id"
CLUSTER_TYPE_FILE = "cluster-type"

DEFAULT_PROFILES_DIR = "profiles"
DEFAULT_SHARED_DIR = "output"
