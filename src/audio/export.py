"""WAV export of rendered audio"""

from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.AUDIO)


def export_wav(path: Union[str, Path], buffer: np.ndarray, sample_rate: int) -> Path:
    """
    Write a float buffer as 16-bit PCM WAV

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(path), np.asarray(buffer, dtype=np.float32), sample_rate, subtype="PCM_16")
    log.info("Audio exported", path=str(path), seconds=round(len(buffer) / sample_rate, 2))
    return path
