"""
MediaPipe model asset download
"""

import logging
import os
import urllib.request

logger = logging.getLogger(__name__)


def ensure_hand_landmarker_task(model_path: str, url: str, timeout_s: int = 30) -> str:
    """
    Make sure `hand_landmarker.task` exists at `model_path`, downloading it if missing

    Raises:
        RuntimeError: the download failed (partial files are removed)
    """
    if os.path.exists(model_path):
        return model_path

    os.makedirs(os.path.dirname(model_path) or ".", exist_ok=True)
    logger.info("downloading hand landmark model to %s", model_path)

    # Only a complete download is moved to model_path
    part_path = model_path + ".part"
    try:
        with urllib.request.urlopen(url, timeout=timeout_s) as response, open(part_path, "wb") as f:
            f.write(response.read())
    except Exception as e:
        if os.path.exists(part_path):
            os.remove(part_path)
        raise RuntimeError(
            f"could not download the hand landmark model from {url}: {e}\n"
            f"download it manually to {model_path}"
        ) from e

    os.replace(part_path, model_path)
    logger.info("model downloaded (%d bytes)", os.path.getsize(model_path))
    return model_path
