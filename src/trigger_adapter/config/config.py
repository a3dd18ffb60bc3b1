# src/trigger_adapter/config/config.py

# ─── Environment variable names ─────────────────────────────────────────────────────
ENV_GCLOUD_PROJECT      = "GCLOUD_PROJECT"
ENV_GOOGLE_CLOUD_PROJECT = "GOOGLE_CLOUD_PROJECT"
ENV_DATABASE_INSTANCE   = "FIREBASE_DATABASE_INSTANCE"
ENV_LOG_LEVEL           = "LOG_LEVEL"
ENV_ENVIRONMENT         = "ENVIRONMENT"
ENV_K_SERVICE           = "K_SERVICE"
ENV_DATABASE_EMULATOR_HOST = "FIREBASE_DATABASE_EMULATOR_HOST"
ENV_TRIGGER_TARGET      = "TRIGGER_TARGET"

# ─── Metadata server ────────────────────────────────────────────────────────────────
METADATA_ZONE_URL       = "http://metadata.google.internal/computeMetadata/v1/instance/zone"
METADATA_PROJECT_URL    = "http://metadata.google.internal/computeMetadata/v1/project/project-id"
METADATA_HEADERS        = {"Metadata-Flavor": "Google"}

# ─── Providers (static constants) ───────────────────────────────────────────────────
FIRESTORE_PROVIDER      = "google.firestore"
FIRESTORE_SERVICE       = "firestore.googleapis.com"
FIRESTORE_LEGACY_PREFIX = "providers/cloud.firestore/eventTypes/"
DEFAULT_DATABASE        = "(default)"

DATABASE_PROVIDER       = "google.firebase.database"
DATABASE_SERVICE        = "firebaseio.com"
DATABASE_LEGACY_PREFIX  = "providers/google.firebase.database/eventTypes/"
DATABASE_EVENT_SOURCE   = "firebasedatabase.googleapis.com"

PUBSUB_PROVIDER         = "google.pubsub"
PUBSUB_SERVICE          = "pubsub.googleapis.com"
PUBSUB_LEGACY_PREFIX    = "providers/cloud.pubsub/eventTypes/"

# ─── Logging ────────────────────────────────────────────────────────────────────────
LOG_FORMAT              = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT         = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_LEVELS      = {
    'development': 'DEBUG',
    'staging': 'INFO',
    'production': 'WARN',
}
