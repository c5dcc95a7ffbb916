"""Audio loading - decode files into mono AudioSignals."""

import logging
from pathlib import Path
from typing import Optional

import audioread
import librosa
import numpy as np
import soundfile as sf

from ..core import AudioDecodeError, AudioSignal, EmptySignal

logger = logging.getLogger(__name__)


class AudioLoader:
    """Decodes audio files into a single downmixed channel."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".mp4"}

    def __init__(
        self,
        target_sr: Optional[int] = None,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Resample to this rate; None keeps the native rate
            normalize: Peak-normalize amplitude if True
        """
        self.target_sr = target_sr
        self.normalize = normalize

    def load(self, path: str) -> AudioSignal:
        """
        Load an audio file as a mono AudioSignal.

        Args:
            path: Path to audio file

        Returns:
            AudioSignal holding the decoded samples

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format not supported
            EmptySignal: If the file decodes to zero samples
            AudioDecodeError: If a supported file cannot be decoded
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )

        header = self.probe(path)
        if header is not None and header.frames == 0:
            raise EmptySignal(f"Audio file has no samples: {path}")

        # librosa downmixes to mono and resamples when target_sr is set
        try:
            audio, sr = librosa.load(str(path), sr=self.target_sr, mono=True)
        except (RuntimeError, audioread.exceptions.DecodeError) as e:
            raise AudioDecodeError(f"Could not decode {path}: {e}") from e
        logger.debug("Decoded %s: %d samples at %d Hz", path.name, len(audio), sr)

        if audio.size == 0:
            raise EmptySignal(f"Audio file has no samples: {path}")

        if self.normalize:
            audio = self._normalize(audio)

        return AudioSignal(audio, sr)

    def probe(self, path: Path):
        """Read the container header, or None if soundfile can't parse it."""
        try:
            return sf.info(str(path))
        except RuntimeError:
            # mp3/m4a and friends go through librosa's audioread fallback
            return None

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max()
        if peak > 0:
            audio = audio / peak
        return audio
