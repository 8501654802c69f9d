"""Constants for the CloudSecret Operator."""

# API Group
API_GROUP = "secrets.masonwr.dev"
API_VERSION = "v1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_CLOUD_SECRET = "CloudSecret"
PLURAL_CLOUD_SECRETS = "cloudsecrets"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"

# Field Manager
FIELD_MANAGER = "cloudsecret-operator"
CONTROLLER_NAME = "cloudsecret-operator"

# Child Secret
CHILD_SECRET_TYPE = "Opaque"

# Requeue intervals (seconds)
DEFAULT_SYNC_PERIOD_SECONDS = 60
RESOLUTION_RETRY_SECONDS = 5

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_CHILD_SECRET_CREATED = "ChildSecretCreated"
EVENT_REASON_CHILD_SECRET_UPDATED = "ChildSecretUpdated"
EVENT_REASON_CHILD_SECRET_DELETED = "ChildSecretDeleted"
EVENT_REASON_RESOLUTION_FAILED = "ResolutionFailed"
