import os
from dotenv import load_dotenv
import os.path

# Load environment variables from .env file (project root)
dotenv_path = os.path.join(os.path.dirname(__file__), '..', '.env')
load_dotenv(dotenv_path=dotenv_path)

# --- Label keys attached to every tenant credential in the store ---
LABEL_KEY_DISPLAY_NAME = "display-name"
LABEL_KEY_TENANT = "tenant-name"
LABEL_KEY_GLOBAL = "global"

# --- Run defaults ---
# Project (or Vault path) where all the shared secrets are stored
SOURCE_PROJECT_ID = os.environ.get('SOURCE_PROJECT_ID', 'my_project')

# CSV file with ',' separated orgName and destination project id
SAMPLE_MAPPING_CSV = os.path.join(os.path.dirname(__file__), 'data', 'sample.csv')
MAPPING_CSV_PATH = os.environ.get('MAPPING_CSV_PATH', SAMPLE_MAPPING_CSV)

LATEST_VERSION = "latest"
REPLICATION_AUTOMATIC = "automatic"

# --- Store backend: "gcp" (Google Secret Manager) or "vault" ---
SECRET_STORE_BACKEND = os.environ.get('SECRET_STORE_BACKEND', 'gcp')

# HashiCorp Vault
VAULT_ADDR = os.environ.get('VAULT_ADDR', 'http://127.0.0.1:8200')
VAULT_AUTH_METHOD = os.environ.get('VAULT_AUTH_METHOD', 'token')
VAULT_TOKEN = os.environ.get('VAULT_TOKEN')
VAULT_ROLE_ID = os.environ.get('VAULT_ROLE_ID')
VAULT_SECRET_ID = os.environ.get('VAULT_SECRET_ID')
VAULT_NAMESPACE = os.environ.get('VAULT_NAMESPACE')
VAULT_MOUNT_POINT = os.environ.get('VAULT_MOUNT_POINT', 'secret')

# Retry settings for store reads
STORE_RETRY_MAX_ATTEMPTS = int(os.environ.get('STORE_RETRY_MAX_ATTEMPTS', 3))
STORE_RETRY_BASE_DELAY = float(os.environ.get('STORE_RETRY_BASE_DELAY', 1.0))
STORE_RETRY_MAX_DELAY = float(os.environ.get('STORE_RETRY_MAX_DELAY', 30.0))
