"""Global constants for World Music Analyzer."""

# Pitch names
PITCH_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Analysis window defaults
DEFAULT_MAX_DURATION_SEC = 15.0
DEFAULT_MAX_PITCH_FRAMES = 20
DEFAULT_MAX_SPECTRAL_WINDOWS = 50
DEFAULT_TOP_N_CULTURES = 5

# Rhythm
ONSET_FRAME_LENGTH = 1024
ONSET_HOP_LENGTH = 512
MIN_TEMPO_BPM = 40.0
MAX_TEMPO_BPM = 220.0
IOI_BUCKET_MS = 50.0
POLYRHYTHM_TOLERANCE = 0.08
POLYRHYTHM_RATIOS = ((3, 2), (4, 3), (5, 4), (5, 3))

# Pitch
PITCH_FRAME_SIZE = 4096
PITCH_FMIN = 50.0
PITCH_FMAX = 2000.0
A4_FREQ = 440.0
A4_MIDI = 69

# Spectrum
SPECTRAL_FRAME_SIZE = 2048
ROLLOFF_PERCENT = 0.85

# Cooperative yield interval (frames between checkpoints)
YIELD_EVERY = 5
