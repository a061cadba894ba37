from pathlib import Path
import os

# Define package root (where this file is located)
ROOT_DIR = Path(__file__).parent.resolve()

# Standard locations for a local rate card workbook / CSV
DATA_DIR = Path(os.environ.get("RATE_CARD_DATA_DIR", Path.cwd() / "data"))
PACKAGE_DATA_DIR = ROOT_DIR / "data"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Remote spreadsheet (OneDrive sharing id, resid, or full sharing link).
# Empty disables the remote strategies and the static backup is used.
SOURCE_FILE_ID = os.environ.get("RATE_CARD_FILE_ID", "").strip()
WORKSHEET_NAME = os.environ.get("RATE_CARD_WORKSHEET", "Rate Card Data")
DOWNLOAD_URL_TEMPLATE = "https://onedrive.live.com/download?resid={file_id}&em=2"
REQUEST_TIMEOUT = float(os.environ.get("RATE_CARD_TIMEOUT", "10"))

# Auto-refresh (seconds between remote reloads)
REFRESH_INTERVAL = int(os.environ.get("RATE_CARD_REFRESH_SECONDS", "60"))
AUTO_REFRESH = _env_flag("RATE_CARD_AUTO_REFRESH", True)

# Optional local file tried before the static backup
LOCAL_RATE_CARD = os.environ.get("RATE_CARD_LOCAL_FILE", "").strip()

# Which calculator(s) this deployment exposes: desired_margin | target_margin | both
CALCULATOR_MODE = os.environ.get("RATE_CARD_MODE", "desired_margin").strip().lower()

LOG_LEVEL = os.environ.get("RATE_CARD_LOG_LEVEL", "INFO")


def source_url(file_id: str = None) -> str:
    """
    Build the download URL for the remote rate card.
    A full http(s) sharing link is used as-is.
    """
    file_id = SOURCE_FILE_ID if file_id is None else file_id
    if not file_id:
        return ""
    if file_id.startswith(("http://", "https://")):
        return file_id
    return DOWNLOAD_URL_TEMPLATE.format(file_id=file_id)


def get_data_path(filename: str, required: bool = True) -> Path:
    """
    Locate a rate card file in standard directories.
    Checks the path as given, DATA_DIR, then the package data folder.

    Args:
        filename: Name (or path) of the file to find
        required: If True, raises FileNotFoundError when not found.
                  If False, returns None when not found.

    Returns the resolved Path if found.
    """
    # 1. Absolute or cwd-relative path
    direct = Path(filename)
    if direct.exists():
        return direct.resolve()

    # 2. Check data folder
    data_path = DATA_DIR / filename
    if data_path.exists():
        return data_path

    # 3. Check package data folder
    package_path = PACKAGE_DATA_DIR / filename
    if package_path.exists():
        return package_path

    # If not found in any location
    if required:
        raise FileNotFoundError(f"Could not find {filename} in {DATA_DIR} or {PACKAGE_DATA_DIR}")
    else:
        return None
