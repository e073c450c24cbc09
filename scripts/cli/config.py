"""CLI configuration: settings, log location, upload folder."""

from pathlib import Path

from progress_config import get_settings

# Project root (parent of scripts/)
ROOT = Path(__file__).resolve().parent.parent.parent

SETTINGS = get_settings()

LOG_PATH = SETTINGS.log_file or (ROOT / "logs" / "console.log")

# Where "M" looks for upload files and writes the template.
UPLOAD_DIR = ROOT / "upload"
TEMPLATE_NAME = "master_codes_template.csv"
