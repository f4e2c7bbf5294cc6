# config.py
# Global runtime configuration
import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("IPPLAN_DATA_DIR", "data"))
REGISTRY_FILE = DATA_DIR / "DATA.json"
UPLOAD_DIR = DATA_DIR / "uploads"
OUTPUT_DIR = DATA_DIR / "output"

HOST = "0.0.0.0"
PORT = 3000

# Address planning
BASE_NETWORK = "172.16.0.0"
HOST_BUFFER_PERCENT = 20
PROBE_LIMIT = 512          # candidate blocks per mask, 512 x /24 from 172.16.0.0
MAX_MASK = 30
ESCALATE_MASK = True       # try the next smaller subnet when a mask runs out of candidates
COMMIT_RETRIES = 3
DYNAMIC_ADDRESS = "DHCP"

# Station equipment
DISK_CAPACITIES = {
    "8TB": 8000,
    "12TB": 12000,
    "16TB": 16000,
    "20TB": 20000,
    "24TB": 24000,
}
RECORDER_DISK_TIER = "16TB"
CAMERAS_PER_RECORDER = 16
SSV_MIN_LICENSES = 8
SETS_PER_SERVER_RED_LIGHT = 4
SETS_PER_SERVER = 12
SSV_CATEGORIES = ("SKP", "KAT A")
VCA_CATEGORIES = ("KAT A", "KAT B")
EQUIPMENT_CLASS = "Klasa-0"
